"""Export: normalized post markdown, sidecar JSON, and the site catalog"""

import json
from pathlib import Path

import yaml
from sqlmodel import Session

from mdpost.core.utils.dates import coerce_date
from mdpost.crud.documents import get_blocks, get_categories
from mdpost.crud.models import BlockEnum, Document, DocumentBlock


FRONTMATTER_ORDER = ("layout", "title", "date", "categories")
CATALOG_FILE = "catalog.json"


def normalize_frontmatter(fm: dict) -> dict:
    """Return fm with the site-generator keys first, remaining keys in original order.

    A stored ISO date string is turned back into a date so YAML emits it unquoted.
    """
    ordered = {k: fm[k] for k in FRONTMATTER_ORDER if k in fm}
    if ordered.get("date") is not None:
        ordered["date"] = coerce_date(ordered["date"]) or ordered["date"]
    ordered.update((k, v) for k, v in fm.items() if k not in ordered)
    return ordered


def build_markdown(doc: Document) -> str:
    """Return the post body with a normalized YAML frontmatter block prepended."""
    fm = normalize_frontmatter(dict(doc.frontmatter or {}))
    header = yaml.dump(fm, default_flow_style=False, allow_unicode=True, sort_keys=False) if fm else ""
    return f"---\n{header}---\n\n{doc.markdown.lstrip()}"


def _outline(blocks: list[DocumentBlock]) -> list[dict]:
    """One entry per section: its heading text (None for a preamble) and block count."""
    outline: dict[int, dict] = {}
    for b in blocks:
        entry = outline.setdefault(b.section, {"position": b.section, "heading": None, "blocks": 0})
        if entry["blocks"] == 0 and b.type == BlockEnum.heading:
            entry["heading"] = b.content.lstrip('#').strip()
        entry["blocks"] += 1
    return [outline[k] for k in sorted(outline)]


def build_sidecar(doc: Document, blocks: list[DocumentBlock], categories: list[str]) -> dict:
    """Build the sidecar JSON dict for a single post."""
    return {
        "slug": doc.slug,
        "path": doc.path,
        "hash": doc.hash,
        "committed_at": doc.committed_at.isoformat() if doc.committed_at else None,
        "frontmatter": doc.frontmatter or {},
        "categories": categories,
        "outline": _outline(blocks),
        "code": [
            {"language": b.language, "line": b.line}
            for b in blocks if b.type == BlockEnum.code
        ],
    }


def catalog_entry(doc: Document, categories: list[str]) -> dict:
    return {
        "slug": doc.slug,
        "path": doc.path,
        "title": doc.title,
        "date": doc.date.isoformat() if doc.date else None,
        "categories": categories,
    }


def build_catalog(entries: list[dict]) -> list[dict]:
    """Order catalog entries newest first, same-date posts by path; undated posts last."""
    dated = sorted((e for e in entries if e["date"]), key=lambda e: e["path"])
    dated.sort(key=lambda e: e["date"], reverse=True)
    undated = sorted((e for e in entries if not e["date"]), key=lambda e: e["path"])
    return dated + undated


def write_doc(doc: Document, session: Session, output_dir: Path, fmt: str = 'md') -> tuple[Path, Path, dict]:
    """Write normalized MD/MDX + sidecar JSON for a single post.

    Output path mirrors the source directory structure:
      output_dir / Path(doc.path).parent / <source stem>.{fmt|json}

    Files are named after the source stem, not the slug, since drafts of one
    article share a slug. Returns (md_path, json_path, catalog_entry).
    """
    src = Path(doc.path)
    parent = src.parent.relative_to(src.anchor) if src.is_absolute() else src.parent
    dest_dir = output_dir / parent
    dest_dir.mkdir(parents=True, exist_ok=True)

    blocks = get_blocks(session, doc.id)
    categories = get_categories(session, doc.id)
    md_path = dest_dir / f"{src.stem}.{fmt}"
    json_path = dest_dir / f"{src.stem}.json"

    md_path.write_text(build_markdown(doc), encoding='utf-8')
    json_path.write_text(
        json.dumps(build_sidecar(doc, blocks, categories), indent=2, ensure_ascii=False),
        encoding='utf-8',
    )
    return md_path, json_path, catalog_entry(doc, categories)


def write_catalog(entries: list[dict], output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / CATALOG_FILE
    path.write_text(json.dumps(build_catalog(entries), indent=2, ensure_ascii=False), encoding='utf-8')
    return path
