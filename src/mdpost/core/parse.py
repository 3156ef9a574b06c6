"""Post discovery, front-matter splitting, and markdown-it tokenization"""

import re
from pathlib import Path
from typing import Any, Optional

import yaml
from markdown_it import MarkdownIt

from mdpost.core.models import ParsedDoc
from mdpost.core.utils.hashing import sha256
from mdpost.core.utils.slug import post_slug


FRONTMATTER_RE = re.compile(r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)', re.DOTALL | re.MULTILINE)
OPENER_RE = re.compile(r'\A---[ \t]*\r?\n')
MD_EXTENSIONS = {'.md', '.mdx'}
BOM = '\ufeff'


def make_parser(preset: str) -> MarkdownIt:
    """Build a MarkdownIt instance for the given preset name."""
    return MarkdownIt(preset, options_update={"linkify": False})


def has_unclosed_frontmatter(text: str) -> bool:
    """True when text opens a front-matter block that never closes."""
    text = text.removeprefix(BOM)
    return bool(OPENER_RE.match(text)) and not FRONTMATTER_RE.match(text)


def split_frontmatter(text: str) -> tuple[Optional[str], str, int]:
    """Return (yaml_text, body, body_offset); yaml_text is None when there is no header.

    body_offset is the number of file lines that precede the body.
    A leading byte-order mark is dropped.
    """
    text = text.removeprefix(BOM)
    m = FRONTMATTER_RE.match(text)
    if not m:
        return None, text, 0
    header = m.group(0)
    offset = header.count('\n') + (0 if header.endswith('\n') else 1)
    return m.group(1), text[m.end():], offset


def load_frontmatter(yaml_text: Optional[str]) -> dict[str, Any]:
    """Load a front-matter YAML block into a dict; raises ValueError if it is not a mapping."""
    if yaml_text is None:
        return {}
    try:
        fm = yaml.safe_load(yaml_text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML frontmatter: {e}") from e
    if not isinstance(fm, dict):
        raise ValueError(f"Invalid YAML frontmatter: expected a mapping, got {type(fm).__name__}")
    return fm


def discover_files(path: Path) -> list[Path]:
    """Return sorted .md/.mdx files under path, or [path] if a single file."""
    if path.is_file():
        return [path] if path.suffix in MD_EXTENSIONS else []
    return sorted(p for p in path.rglob('*') if p.is_file() and p.suffix in MD_EXTENSIONS)


def parse_text(text: str, path: Path, parser_config: str = 'gfm-like') -> ParsedDoc:
    """Parse post text into a ParsedDoc with the body's token stream."""
    yaml_text, body, offset = split_frontmatter(text)
    frontmatter = load_frontmatter(yaml_text)
    slug = frontmatter.get('slug') or post_slug(path.stem)
    return ParsedDoc(
        path=path,
        slug=str(slug),
        raw_markdown=text,
        markdown=body,
        hash=sha256(text),
        frontmatter=frontmatter,
        body_offset=offset,
        tokens=make_parser(parser_config).parse(body),
    )


def parse_file(path: Path, parser_config: str = 'gfm-like') -> ParsedDoc:
    """Parse a single post file into a ParsedDoc."""
    return parse_text(path.read_text(encoding='utf-8-sig'), path, parser_config)
