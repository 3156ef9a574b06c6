"""Shared fixtures for crud unit tests"""

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from mdpost.core.extract.extract import extract_doc
from mdpost.core.parse import parse_text


POST = """\
---
layout: post
title: {title}
date: {date}
categories: {categories}
---

## Bad

```sql
SELECT * FROM orders;
```
"""


def _make_extracted(path="posts/filter-early.md", title="Filter Early", date="2019-03-01", categories="sql oracle"):
    """Build an ExtractedDoc from a small templated post."""
    text = POST.format(title=title, date=date, categories=categories)
    return extract_doc(parse_text(text, Path(path)), max_nesting=2)


@pytest.fixture(name="make_extracted")
def make_extracted_fixture():
    return _make_extracted


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s
