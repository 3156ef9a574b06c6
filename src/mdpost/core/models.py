"""Post data models for the parse, extract, and lint steps"""

from dataclasses import dataclass
from datetime import date as _date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator

from mdpost.core.utils.dates import coerce_date
from mdpost.crud.models import BlockEnum


class FrontMatter(BaseModel):
    """Site-generator metadata at the top of a post. Unknown keys are kept as extras."""
    model_config = ConfigDict(extra="allow")

    layout:     Optional[str] = None
    title:      Optional[str] = None
    date:       Optional[Union[datetime, _date]] = None
    categories: list[str] = []

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any):
        if value is None:
            return None
        parsed = coerce_date(value)
        if parsed is None:
            raise ValueError(f"unrecognised date: {value!r}")
        return parsed

    @field_validator("categories", mode="before")
    @classmethod
    def _split_categories(cls, value: Any):
        # Jekyll allows `categories: sql oracle`
        if value is None:
            return []
        if isinstance(value, str):
            return value.split()
        return value


class Block(BaseModel):
    """A single top-level content block from a post body."""
    type: BlockEnum
    content: str
    level: Optional[int] = None       # heading level (1-6)
    language: Optional[str] = None    # first word of a fence info string
    line: Optional[int] = None        # 1-based line in the source file


class Section(BaseModel):
    position: int
    heading: Optional[str] = None     # None for the preamble before the first heading
    blocks: list[Block]


class ExtractedDoc(BaseModel):
    """Structured post: front matter plus ordered body sections."""
    slug: str
    path: str
    hash: str                         # sha256 of the full file, front matter included
    markdown: str                     # body only
    frontmatter: FrontMatter
    sections: list[Section]

    @property
    def blocks(self) -> list[Block]:
        return [b for s in self.sections for b in s.blocks]


@dataclass
class ParsedDoc:
    """Internal parse result carrying markdown-it tokens; not persisted."""
    path:         Path
    slug:         str
    raw_markdown: str          # full file content (includes frontmatter)
    markdown:     str          # body only (frontmatter stripped)
    hash:         str
    frontmatter:  dict[str, Any]
    body_offset:  int          # number of file lines before the body
    tokens:       list         # markdown-it Token objects


class Severity(str, Enum):
    error = "error"
    warning = "warning"


class Issue(BaseModel):
    """One lint finding against a post."""
    path: str
    rule: str
    severity: Severity
    message: str
    line: Optional[int] = None

    def format(self) -> str:
        where = f"{self.path}:{self.line}" if self.line else self.path
        return f"{where}: {self.severity.value} [{self.rule}] {self.message}"
