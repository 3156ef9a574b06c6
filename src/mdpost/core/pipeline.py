"""Pipeline step functions: lint, index, and export orchestration"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Sequence

from sqlmodel import Session

from mdpost.core.export import write_catalog, write_doc
from mdpost.core.extract.extract import extract_doc
from mdpost.core.lint.lint import DEFAULT_REQUIRED, lint_file
from mdpost.core.models import Issue
from mdpost.core.parse import discover_files, parse_file
from mdpost.crud.documents import commit_doc, delete_missing


logger = logging.getLogger(__name__)


def run_lint(
    path: str,
    required_fields: Sequence[str] = DEFAULT_REQUIRED,
    require_fence_language: bool = False,
    parser_config: str = 'gfm-like',
    ) -> list[tuple[Path, list[Issue]]]:
    """Lint every post under path. Returns (file, issues) pairs, clean files included."""
    results = []
    for p in discover_files(Path(path)):
        issues = lint_file(
            p,
            required_fields=required_fields,
            require_fence_language=require_fence_language,
            parser_config=parser_config,
        )
        results.append((p, issues))
    logger.info("linted %d file(s) under %s", len(results), path)
    return results


def run_index(
    engine,
    path: str,
    parser_config: str = 'gfm-like',
    max_nesting: int = 2,
    prune: bool = False,
    ) -> tuple[dict[str, int], list[tuple[str, str]]]:
    """Parse every post under path and upsert it into the catalog.

    Returns (counts, changes) where changes lists (status, path) for
    created/updated/deleted posts. Returns ({}, []) when no posts are found.
    With prune, catalog rows under path whose file is gone are deleted.
    """
    files = discover_files(Path(path))
    if not files:
        return {}, []

    committed_at = datetime.now()
    counts = {"created": 0, "updated": 0, "unchanged": 0, "deleted": 0}
    changes = []
    with Session(engine) as session:
        for p in files:
            try:
                extracted = extract_doc(parse_file(p, parser_config), max_nesting)
            except Exception as e:
                raise RuntimeError(f"Failed to index {p}: {e}") from e
            doc, status = commit_doc(session, extracted, committed_at)
            counts[status] += 1
            if status != 'unchanged':
                changes.append((status, doc.path))

        if prune:
            for doc in delete_missing(session, path, {str(p) for p in files}):
                counts["deleted"] += 1
                changes.append(("deleted", doc.path))
        session.commit()

    logger.info("indexed %s: %s", path, counts)
    return counts, changes


def run_export(
    session: Session,
    docs: list,
    output_dir: Path,
    fmt: str = 'md',
    ) -> list[tuple[str, Path]]:
    """Write docs and catalog.json to output_dir using an open session. Returns (slug, md_path) pairs."""
    results = []
    entries = []
    for doc in docs:
        md_path, _, entry = write_doc(doc, session, output_dir, fmt)
        results.append((doc.slug, md_path))
        entries.append(entry)
    write_catalog(entries, output_dir)
    return results
