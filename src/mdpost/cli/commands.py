"""CLI command implementations"""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from sqlmodel import Session

from mdpost.config import Settings, load_config
from mdpost.core.lint.lint import count_by_severity
from mdpost.core.parse import discover_files
from mdpost.core.pipeline import run_export, run_index, run_lint
from mdpost.core.utils.diff import diff_summary, unified_diff
from mdpost.crud.database import init_db, make_engine, reset_db
from mdpost.crud.documents import (
    get_all_documents,
    get_by_category,
    get_last_committed,
    list_categories,
)


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _require_posts(path: str) -> None:
    if not Path(path).exists():
        _fail(f"Path not found: {path}")
    if not discover_files(Path(path)):
        _fail(f"No .md/.mdx files found under {path}")


def lint_cmd(
    path: Annotated[str, typer.Argument(help="Post file or directory to lint")],
    fmt: Annotated[Optional[str], typer.Option("--format", help="Report format: text or json")] = None,
    strict: Annotated[bool, typer.Option("--strict", help="Treat warnings as failures")] = False,
    fence_language: Annotated[bool, typer.Option(
        "--require-fence-language", help="Warn on code fences without a language",
    )] = False,
    ):
    """Check front matter, code fences, and cross-document references."""
    settings = _settings(overrides={"report_format": fmt, "require_fence_language": fence_language or None})
    _require_posts(path)

    results = run_lint(
        path,
        required_fields=settings.required_fields,
        require_fence_language=settings.require_fence_language,
        parser_config=settings.parser_config,
    )
    issues = [i for _, file_issues in results for i in file_issues]
    counts = count_by_severity(issues)

    if settings.report_format == "json":
        typer.echo(json.dumps([i.model_dump(mode="json") for i in issues], indent=2))
    else:
        for issue in issues:
            typer.echo(issue.format())
        typer.echo(
            f"Checked {len(results)} document(s): "
            f"{counts['error']} error(s), {counts['warning']} warning(s)"
        )

    if counts["error"] or (strict and counts["warning"]):
        raise typer.Exit(1)


def index_cmd(
    path: Annotated[str, typer.Argument(help="Post file or directory to index")],
    nesting: Annotated[Optional[int], typer.Option("--max-nesting", help="Max heading depth for sections")] = None,
    parser: Annotated[Optional[str], typer.Option("--parser-config", help="MarkdownIt preset name")] = None,
    prune: Annotated[bool, typer.Option("--prune", help="Remove catalog entries whose file is gone")] = False,
    ):
    """Parse posts and upsert them into the catalog database."""
    settings = _settings(overrides={"max_nesting": nesting, "parser_config": parser})
    _require_posts(path)
    engine = make_engine(settings.db_url)
    init_db(engine)

    try:
        counts, changes = run_index(engine, path, settings.parser_config, settings.max_nesting, prune)
    except RuntimeError as e:
        _fail(str(e))
    except Exception as e:
        _fail("Index failed", e)

    for status, doc_path in changes:
        typer.echo(f"  {status}: {doc_path}")
    typer.echo(
        f"Index complete - "
        f"{counts['created']} created, "
        f"{counts['updated']} updated, "
        f"{counts['unchanged']} unchanged"
        + (f", {counts['deleted']} deleted" if prune else "")
    )


def list_cmd(
    category: Annotated[Optional[str], typer.Option("--category", help="List posts in this category")] = None,
    ):
    """List categories with post counts, or the posts filed under one category."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    init_db(engine)

    with Session(engine) as session:
        if category is None:
            rows = [f"{name} ({count})" for name, count in list_categories(session)]
            empty = "No categories found in database."
        else:
            rows = [
                f"{d.date.date().isoformat() if d.date else '----------'}  {d.slug}  {d.title or ''}".rstrip()
                for d in get_by_category(session, category)
            ]
            empty = f"No posts found in category '{category}'."

    if not rows:
        typer.echo(empty)
        raise typer.Exit(1)
    for row in rows:
        typer.echo(row)


def export_cmd(
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    fmt: Annotated[Optional[str], typer.Option("--output-format", help="md or mdx")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Export posts in this category")] = None,
    all_docs: Annotated[bool, typer.Option("--all", help="Export all posts in the database")] = False,
    ):
    """Write normalized posts, sidecar JSON, and catalog.json to the output dir."""
    settings = _settings(overrides={"output_dir": out, "output_format": fmt})
    engine = make_engine(settings.db_url)
    init_db(engine)
    output_dir = Path(settings.output_dir)

    try:
        with Session(engine) as session:
            if all_docs:
                docs = get_all_documents(session)
                scope = "all"
            elif category:
                docs = get_by_category(session, category)
                scope = f"category '{category}'"
            else:
                docs = get_last_committed(session)
                scope = "last index"

            if not docs:
                typer.echo(f"No documents found for scope: {scope}.")
                raise typer.Exit(1)

            results = run_export(session, docs, output_dir, settings.output_format)
    except typer.Exit:
        raise
    except Exception as e:
        _fail("Export failed", e)

    for slug, md_path in results:
        typer.echo(f"  {slug} -> {md_path}")
    typer.echo(f"Exported {len(results)} document(s) to {output_dir}/")


def diff_cmd(
    old: Annotated[Path, typer.Argument(help="Earlier draft")],
    new: Annotated[Path, typer.Argument(help="Later draft")],
    context: Annotated[int, typer.Option("--context", "-U", min=0, help="Lines of context")] = 3,
    ):
    """Show a unified diff between two drafts of a post."""
    texts = []
    for p in (old, new):
        try:
            texts.append(p.read_text(encoding="utf-8"))
        except OSError as e:
            _fail(f"Cannot read {p}", e)

    lines = unified_diff(texts[0], texts[1], str(old), str(new), context)
    if lines:
        typer.echo("".join(lines), nl=False)
    summary = diff_summary(texts[0], texts[1])
    typer.echo(
        f"{summary['added']} added, {summary['deleted']} deleted, {summary['unchanged']} unchanged"
    )


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize the catalog schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        reset_db(engine)
        typer.echo("Existing data cleared.")
    else:
        init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")
