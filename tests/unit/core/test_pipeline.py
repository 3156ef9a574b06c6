"""Unit tests for core/pipeline.py"""

import json

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdpost.core.pipeline import run_export, run_index, run_lint
from mdpost.crud.documents import get_all_documents


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(autouse=True)
def chdir_tmp(tmp_path, monkeypatch):
    """Run each test from a clean tmp directory so relative paths are isolated."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture(name="posts")
def posts_fixture(tmp_path, sample_post):
    d = tmp_path / "posts"
    d.mkdir()
    (d / "2019-03-01-filter-early.md").write_text(sample_post)
    (d / "2019-03-02-filter-early.md").write_text(sample_post.replace("Filter Early", "Filter Early (v2)"))
    return d


# --- run_lint ---

def test_run_lint_reports_every_file(posts):
    (posts / "broken.md").write_text("# no header\n")
    results = run_lint("posts")
    assert [p.name for p, _ in results] == [
        "2019-03-01-filter-early.md", "2019-03-02-filter-early.md", "broken.md",
    ]
    assert [len(issues) for _, issues in results] == [0, 0, 1]


def test_run_lint_passes_options(posts):
    (posts / "bare.md").write_text("---\ntitle: T\n---\n```\nx\n```\n")
    results = dict(run_lint("posts/bare.md", required_fields=["title"], require_fence_language=True))
    issues = next(iter(results.values()))
    assert [i.rule for i in issues] == ["fence-language"]


# --- run_index ---

def test_run_index_returns_empty_when_no_posts(engine, tmp_path):
    assert run_index(engine, str(tmp_path)) == ({}, [])


def test_run_index_creates_then_unchanged(engine, posts):
    counts, changes = run_index(engine, "posts")
    assert counts["created"] == 2
    assert [s for s, _ in changes] == ["created", "created"]

    counts, changes = run_index(engine, "posts")
    assert counts["unchanged"] == 2
    assert changes == []


def test_run_index_updates_edited_draft(engine, posts):
    run_index(engine, "posts")
    draft = posts / "2019-03-02-filter-early.md"
    draft.write_text(draft.read_text() + "\nOne more paragraph.\n")
    counts, changes = run_index(engine, "posts")
    assert counts == {"created": 0, "updated": 1, "unchanged": 1, "deleted": 0}
    assert changes == [("updated", str(draft.relative_to(posts.parent)))]


def test_run_index_prune(engine, posts):
    run_index(engine, "posts")
    (posts / "2019-03-01-filter-early.md").unlink()
    counts, changes = run_index(engine, "posts", prune=True)
    assert counts["deleted"] == 1
    assert changes == [("deleted", "posts/2019-03-01-filter-early.md")]
    with Session(engine) as session:
        assert len(get_all_documents(session)) == 1


def test_run_index_raises_with_file_context(engine, posts):
    (posts / "bad.md").write_text("---\ndate: someday\n---\nBody\n")
    with pytest.raises(RuntimeError, match="bad.md"):
        run_index(engine, "posts")


# --- run_export ---

def test_run_export_writes_posts_and_catalog(engine, posts, tmp_path):
    run_index(engine, "posts")
    with Session(engine) as session:
        docs = get_all_documents(session)
        results = run_export(session, docs, tmp_path / "dist", "md")

    assert [slug for slug, _ in results] == ["filter-early", "filter-early"]
    assert (tmp_path / "dist" / "posts" / "2019-03-01-filter-early.md").exists()
    assert (tmp_path / "dist" / "posts" / "2019-03-02-filter-early.json").exists()
    catalog = json.loads((tmp_path / "dist" / "catalog.json").read_text())
    assert [e["title"] for e in catalog] == ["Filter Early (v2) in Oracle SQL", "Filter Early in Oracle SQL"]
