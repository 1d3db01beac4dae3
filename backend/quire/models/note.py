"""
Quire Backend: Note SQLAlchemy Models
======================================

What:  ORM models for notes, their content, their place in the tree and
       their labels.
How:   Inherit from `quire.database.Base`; Alembic reads these for migrations.
Who:   Used by NoteService for CRUD and by the image service indirectly.

Table Design Rationale:
    - note_id: 12 random alphanumerics. Short enough for URLs
      (api/images/{note_id}/{file_name}), unguessable enough not to enumerate.
    - Content lives in its own table (note_contents) so listing notes or
      changing a mime never drags a multi-megabyte blob through the session.
    - branches link a note to a parent. A note may have several branches
      (clones); the tree semantics themselves live elsewhere.
    - attributes are key/value labels; `originalFileName` is one of them.
"""

import secrets
import string
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quire.database import Base

_ID_ALPHABET = string.ascii_letters + string.digits


def new_entity_id(length: int = 12) -> str:
    """Random alphanumeric identifier used for every entity primary key."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A single note. Image notes have type 'image' and an `image/*` mime.

    Lifecycle of an uploaded image note:
        1. Created with mime 'unknown' and empty content
        2. `originalFileName` label recorded
        3. Detached image task commits the real mime and content
    """

    __tablename__ = "notes"

    note_id: Mapped[str] = mapped_column(String(12), primary_key=True, default=new_entity_id)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="text")
    mime: Mapped[str] = mapped_column(String(255), nullable=False, default="text/html")
    is_protected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    date_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    def __repr__(self) -> str:
        return f"<Note(note_id={self.note_id}, type='{self.type}', mime='{self.mime}')>"


class NoteContent(Base):
    """Binary content of a note, one row per note."""

    __tablename__ = "note_contents"

    note_id: Mapped[str] = mapped_column(
        String(12), ForeignKey("notes.note_id", ondelete="CASCADE"), primary_key=True
    )
    content: Mapped[bytes] = mapped_column(LargeBinary, nullable=False, default=b"")
    date_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )


class Branch(Base):
    """Placement of a note under a parent note."""

    __tablename__ = "branches"

    branch_id: Mapped[str] = mapped_column(String(12), primary_key=True, default=new_entity_id)
    note_id: Mapped[str] = mapped_column(
        String(12), ForeignKey("notes.note_id", ondelete="CASCADE"), nullable=False
    )
    parent_note_id: Mapped[str] = mapped_column(
        String(12), ForeignKey("notes.note_id", ondelete="CASCADE"), nullable=False
    )
    note_position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("idx_branches_parent_note_id", "parent_note_id"),
    )


class Attribute(Base):
    """A label attached to a note (name/value pair)."""

    __tablename__ = "attributes"

    attribute_id: Mapped[str] = mapped_column(String(12), primary_key=True, default=new_entity_id)
    note_id: Mapped[str] = mapped_column(
        String(12), ForeignKey("notes.note_id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="label")
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default="")
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_attributes_note_id_name", "note_id", "name"),
    )

    def __repr__(self) -> str:
        return f"<Attribute(note_id={self.note_id}, name='{self.name}', value='{self.value}')>"
