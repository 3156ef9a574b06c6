"""Post catalog persistence: upsert, block/category replacement, lookups"""

import logging
from datetime import datetime
from pathlib import Path

from sqlalchemy import func
from sqlmodel import Session, select

from mdpost.core.models import ExtractedDoc
from mdpost.core.utils.dates import as_datetime
from mdpost.core.utils.hashing import sha256
from mdpost.crud.models import Document, DocumentBlock, DocumentCategory


logger = logging.getLogger(__name__)


def get_by_path(session: Session, path: str) -> Document | None:
    """Return the Document with the given source path, or None if not found."""
    return session.exec(select(Document).where(Document.path == path)).one_or_none()


def get_by_slug(session: Session, slug: str) -> Document | None:
    """Return the first Document with the given slug, or None if not found.

    Drafts of the same article may share a slug; the one with the lowest path wins.
    """
    return session.exec(select(Document).where(Document.slug == slug).order_by(Document.path)).first()


def get_all_documents(session: Session) -> list[Document]:
    """Return all documents ordered by path."""
    return list(session.exec(select(Document).order_by(Document.path)).all())


def get_last_committed(session: Session) -> list[Document]:
    """Return documents from the most recent index batch (MAX committed_at)."""
    max_ts = session.exec(select(func.max(Document.committed_at))).one()
    if max_ts is None:
        return []
    return list(session.exec(
        select(Document).where(Document.committed_at == max_ts).order_by(Document.path)
    ).all())


def get_by_category(session: Session, name: str) -> list[Document]:
    """Return documents filed under a front-matter category, newest first."""
    stmt = (
        select(Document)
        .join(DocumentCategory, DocumentCategory.document_id == Document.id)
        .where(DocumentCategory.name == name)
        .order_by(Document.date.desc(), Document.path)
    )
    return list(session.exec(stmt).all())


def list_categories(session: Session) -> list[tuple[str, int]]:
    """Return (category, document_count) pairs sorted by name."""
    stmt = (
        select(DocumentCategory.name, func.count(DocumentCategory.document_id))
        .group_by(DocumentCategory.name)
        .order_by(DocumentCategory.name)
    )
    return [(name, count) for name, count in session.exec(stmt).all()]


def get_categories(session: Session, document_id) -> list[str]:
    """Return a document's categories in front-matter order."""
    rows = session.exec(
        select(DocumentCategory)
        .where(DocumentCategory.document_id == document_id)
        .order_by(DocumentCategory.position)
    ).all()
    return [r.name for r in rows]


def get_blocks(session: Session, document_id) -> list[DocumentBlock]:
    """Return a document's blocks in reading order."""
    return list(session.exec(
        select(DocumentBlock)
        .where(DocumentBlock.document_id == document_id)
        .order_by(DocumentBlock.section, DocumentBlock.position)
    ).all())


def delete_document(session: Session, doc: Document) -> None:
    """Delete a document and its dependent rows. Flushes; caller commits."""
    _replace_children(session, doc.id, None)
    session.delete(doc)
    session.flush()


def delete_missing(session: Session, root: str, keep_paths: set[str]) -> list[Document]:
    """Delete documents stored under root whose path is not in keep_paths. Returns the deleted rows."""
    root_path = Path(root)
    removed = []
    for doc in get_all_documents(session):
        doc_path = Path(doc.path)
        if doc.path in keep_paths:
            continue
        if doc_path == root_path or root_path in doc_path.parents:
            removed.append(doc)
            delete_document(session, doc)
    return removed


def _replace_children(session: Session, doc_id, extracted: ExtractedDoc | None) -> None:
    """Delete existing blocks/categories for a document and insert those of extracted, if given."""
    for row in session.exec(select(DocumentBlock).where(DocumentBlock.document_id == doc_id)).all():
        session.delete(row)
    for row in session.exec(select(DocumentCategory).where(DocumentCategory.document_id == doc_id)).all():
        session.delete(row)
    session.flush()

    if extracted is None:
        return

    for section in extracted.sections:
        for position, blk in enumerate(section.blocks):
            session.add(DocumentBlock(
                document_id=doc_id,
                section=section.position,
                position=position,
                type=blk.type,
                content=blk.content,
                hash=sha256(blk.content),
                level=blk.level,
                language=blk.language,
                line=blk.line,
            ))

    # a category listed twice is stored once
    for position, name in enumerate(dict.fromkeys(extracted.frontmatter.categories)):
        session.add(DocumentCategory(document_id=doc_id, name=name, position=position))

    session.flush()


def _apply(doc: Document, extracted: ExtractedDoc) -> None:
    fm = extracted.frontmatter
    doc.slug = extracted.slug
    doc.path = extracted.path
    doc.hash = extracted.hash
    doc.markdown = extracted.markdown
    doc.layout = fm.layout
    doc.title = fm.title
    doc.date = as_datetime(fm.date)
    doc.frontmatter = fm.model_dump(mode="json", exclude_unset=True) or None


def commit_doc(
    session: Session,
    extracted: ExtractedDoc,
    committed_at: datetime | None = None,
    ) -> tuple[Document, str]:
    """Upsert an ExtractedDoc by path.

    Returns (doc, status) where status is 'created', 'updated', or 'unchanged'.
    Flushes but does not commit; caller controls the transaction.
    committed_at is set on created/updated docs only.
    """
    doc = get_by_path(session, extracted.path)

    if doc:
        if doc.hash == extracted.hash:
            return doc, 'unchanged'
        _apply(doc, extracted)
        doc.updated_at = datetime.now()
        doc.committed_at = committed_at
        session.add(doc)
        session.flush()
        _replace_children(session, doc.id, extracted)
        logger.info("updated %s", doc.path)
        return doc, 'updated'

    doc = Document(slug=extracted.slug, path=extracted.path, hash=extracted.hash,
                   markdown=extracted.markdown, committed_at=committed_at)
    _apply(doc, extracted)
    session.add(doc)
    session.flush()
    _replace_children(session, doc.id, extracted)
    logger.info("created %s", doc.path)
    return doc, 'created'
