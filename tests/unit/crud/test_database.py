"""Unit tests for crud/database.py"""

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlmodel import Session

from mdpost.crud.database import init_db, make_engine, reset_db
from mdpost.crud.models import Document


SQLITE_MEM = "sqlite://"


def test_make_engine_returns_engine():
    assert isinstance(make_engine(SQLITE_MEM), Engine)


def test_init_db_creates_tables():
    engine = make_engine(SQLITE_MEM)
    init_db(engine)
    tables = set(inspect(engine).get_table_names())
    assert {"documents", "document_categories", "document_blocks"} <= tables


def test_reset_db_clears_rows():
    engine = make_engine(SQLITE_MEM)
    init_db(engine)
    with Session(engine) as session:
        session.add(Document(slug="s", path="s.md", hash="0" * 64, markdown="body"))
        session.commit()
    reset_db(engine)
    with Session(engine) as session:
        assert session.query(Document).count() == 0
