"""Unit tests for crud/documents.py"""

from datetime import datetime

from sqlmodel import select

from mdpost.crud.documents import (
    commit_doc, delete_missing, get_all_documents, get_blocks, get_by_category, get_by_path,
    get_by_slug, get_categories, get_last_committed, list_categories,
)
from mdpost.crud.models import BlockEnum, Document, DocumentBlock, DocumentCategory


# --- commit_doc ---

def test_commit_creates(session, make_extracted):
    doc, status = commit_doc(session, make_extracted())
    assert status == "created"
    assert doc.slug == "filter-early"
    assert doc.title == "Filter Early"
    assert doc.layout == "post"
    assert doc.date == datetime(2019, 3, 1)


def test_commit_stores_frontmatter_as_json(session, make_extracted):
    doc, _ = commit_doc(session, make_extracted())
    assert doc.frontmatter == {
        "layout": "post", "title": "Filter Early", "date": "2019-03-01", "categories": ["sql", "oracle"],
    }


def test_commit_unchanged_when_hash_matches(session, make_extracted):
    commit_doc(session, make_extracted())
    _, status = commit_doc(session, make_extracted())
    assert status == "unchanged"


def test_commit_updates_and_replaces_children(session, make_extracted):
    first, _ = commit_doc(session, make_extracted(categories="sql"))
    doc, status = commit_doc(session, make_extracted(title="Filter Early v2", categories="[oracle, tuning]"))
    assert status == "updated"
    assert doc.id == first.id
    assert doc.title == "Filter Early v2"
    assert get_categories(session, doc.id) == ["oracle", "tuning"]
    assert len(session.exec(select(Document)).all()) == 1


def test_commit_sets_committed_at(session, make_extracted):
    ts = datetime(2026, 1, 1, 12, 0)
    doc, _ = commit_doc(session, make_extracted(), committed_at=ts)
    assert doc.committed_at == ts


def test_commit_blocks(session, make_extracted):
    doc, _ = commit_doc(session, make_extracted())
    blocks = get_blocks(session, doc.id)
    assert [(b.section, b.position, b.type) for b in blocks] == [
        (0, 0, BlockEnum.heading),
        (0, 1, BlockEnum.code),
    ]
    assert blocks[1].language == "sql"
    assert blocks[1].line == 10
    assert len(blocks[1].hash) == 64


def test_duplicate_categories_stored_once(session, make_extracted):
    doc, _ = commit_doc(session, make_extracted(categories="sql sql oracle"))
    assert get_categories(session, doc.id) == ["sql", "oracle"]


# --- lookups ---

def test_get_by_path_and_slug(session, make_extracted):
    doc, _ = commit_doc(session, make_extracted())
    assert get_by_path(session, "posts/filter-early.md").id == doc.id
    assert get_by_path(session, "no/such.md") is None
    assert get_by_slug(session, "filter-early").id == doc.id
    assert get_by_slug(session, "missing") is None


def test_get_by_slug_prefers_lowest_path(session, make_extracted):
    commit_doc(session, make_extracted(path="posts/b/filter-early.md"))
    commit_doc(session, make_extracted(path="posts/a/filter-early.md"))
    assert get_by_slug(session, "filter-early").path == "posts/a/filter-early.md"


def test_get_by_category_newest_first(session, make_extracted):
    commit_doc(session, make_extracted(path="a.md", date="2019-01-01", categories="sql"))
    commit_doc(session, make_extracted(path="b.md", date="2020-01-01", categories="sql oracle"))
    commit_doc(session, make_extracted(path="c.md", date="2021-01-01", categories="oracle"))
    assert [d.path for d in get_by_category(session, "sql")] == ["b.md", "a.md"]
    assert get_by_category(session, "nope") == []


def test_list_categories_counts(session, make_extracted):
    commit_doc(session, make_extracted(path="a.md", categories="sql"))
    commit_doc(session, make_extracted(path="b.md", categories="sql oracle"))
    assert list_categories(session) == [("oracle", 1), ("sql", 2)]


def test_get_last_committed(session, make_extracted):
    commit_doc(session, make_extracted(path="a.md"), committed_at=datetime(2026, 1, 1))
    commit_doc(session, make_extracted(path="b.md"), committed_at=datetime(2026, 1, 2))
    assert [d.path for d in get_last_committed(session)] == ["b.md"]


def test_get_last_committed_empty(session, make_extracted):
    assert get_last_committed(session) == []


def test_get_all_documents_ordered(session, make_extracted):
    commit_doc(session, make_extracted(path="z.md"))
    commit_doc(session, make_extracted(path="a.md"))
    assert [d.path for d in get_all_documents(session)] == ["a.md", "z.md"]


# --- delete_missing ---

def test_delete_missing_only_under_root(session, make_extracted):
    commit_doc(session, make_extracted(path="posts/keep.md"))
    commit_doc(session, make_extracted(path="posts/gone.md"))
    commit_doc(session, make_extracted(path="drafts/other.md"))

    removed = delete_missing(session, "posts", {"posts/keep.md"})

    assert [d.path for d in removed] == ["posts/gone.md"]
    assert [d.path for d in get_all_documents(session)] == ["drafts/other.md", "posts/keep.md"]
    assert session.exec(select(DocumentBlock)).all()
    assert len(session.exec(select(DocumentCategory)).all()) == 4
