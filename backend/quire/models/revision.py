"""
Quire Backend: Note Revision Model
===================================

What:  Snapshot of a note's fields and content taken before an in-place change.
Why:   Updating an image replaces its content; the previous bytes must stay
       recoverable. A revision is written (and committed) before the new
       content becomes visible.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, LargeBinary, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quire.database import Base
from quire.models.note import new_entity_id, utc_now


class NoteRevision(Base):
    __tablename__ = "note_revisions"

    note_revision_id: Mapped[str] = mapped_column(
        String(12), primary_key=True, default=new_entity_id
    )
    note_id: Mapped[str] = mapped_column(
        String(12), ForeignKey("notes.note_id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    mime: Mapped[str] = mapped_column(String(255), nullable=False)
    is_protected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    content: Mapped[Optional[bytes]] = mapped_column(LargeBinary, nullable=True)
    # When the snapshotted state was last edited (the note's date_modified)
    date_last_edited: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    date_created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )

    __table_args__ = (
        Index("idx_note_revisions_note_id", "note_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<NoteRevision(note_revision_id={self.note_revision_id}, "
            f"note_id={self.note_id}, mime='{self.mime}')>"
        )
