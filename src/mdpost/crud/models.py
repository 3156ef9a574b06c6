"""Database table definitions for indexed posts, their categories, and body blocks"""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from uuid import UUID, uuid4

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, JSON, Text, String


class Document(SQLModel, table=True):
    """An indexed post; the source file on disk stays the source of truth"""
    __tablename__ = "documents"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    slug: str = Field(..., index=True, nullable=False)
    path: str = Field(..., sa_column=Column(Text, nullable=False, unique=True))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    markdown: str = Field(..., sa_column=Column(Text, nullable=False))
    layout: Optional[str] = Field(default=None, nullable=True)
    title: Optional[str] = Field(default=None, sa_column=Column(Text, nullable=True))
    date: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=True), nullable=True))
    frontmatter: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON, nullable=True))
    created_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    updated_at: datetime = Field(default_factory=datetime.now, sa_column=Column(DateTime(timezone=False), nullable=False))
    committed_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime(timezone=False), nullable=True))


class DocumentCategory(SQLModel, table=True):
    """Front-matter category assigned to a post, in front-matter order"""
    __tablename__ = "document_categories"
    document_id: UUID = Field(foreign_key="documents.id", primary_key=True)
    name: str = Field(primary_key=True, index=True)
    position: int = Field(default=0, nullable=False)


class BlockEnum(str, Enum):
    """Restrict the types of body blocks to a predefined set of elements"""
    heading = "heading"
    paragraph = "paragraph"
    list = "list"
    code = "code"
    table = "table"
    html = "html"
    quote = "quote"
    figure = "figure"


class DocumentBlock(SQLModel, table=True):
    """A top-level block of a post body, addressed by section and position"""
    __tablename__ = "document_blocks"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    document_id: UUID = Field(..., foreign_key="documents.id", index=True)
    section: int = Field(..., nullable=False, description="Position of the enclosing section")
    position: int = Field(..., nullable=False, description="Position of the block within the section")
    type: BlockEnum = Field(..., nullable=False)
    content: str = Field(..., sa_column=Column(Text, nullable=False))
    hash: str = Field(..., sa_column=Column(String(64), nullable=False))
    level: Optional[int] = Field(default=None, description="Heading level")
    language: Optional[str] = Field(default=None, description="Code fence language")
    line: Optional[int] = Field(default=None, description="1-based line in the source file")
