"""Shared fixtures for core unit tests"""

import pytest
from markdown_it import MarkdownIt


SAMPLE_POST = """\
---
layout: post
title: Filter Early in Oracle SQL
date: 2019-03-01 10:00:00 -0500
categories: [sql, oracle]
---

Some intro text.

## Bad

```sql
SELECT * FROM (SELECT * FROM orders) WHERE status = 'OPEN';
```

## Good

- push predicates down
- keep CTEs small

```sql
WITH open_orders AS (SELECT * FROM orders WHERE status = 'OPEN')
SELECT * FROM open_orders;
```
"""


@pytest.fixture(name="parser")
def parser_fixture():
    return MarkdownIt("gfm-like", options_update={"linkify": False})


@pytest.fixture(name="sample_post")
def sample_post_fixture():
    return SAMPLE_POST
