"""
Quire Backend: Note Revision Service
=====================================

What:  Snapshots a note (fields + content) before it is changed in place.
Who:   ImageService.update_image, before the new image replaces the old one.

Ordering contract:
    The caller commits the snapshot before the new content can be written.
    A reader may see old content with a snapshot, or new content with a
    snapshot, but never new content without one.
"""

import logging
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from quire.models.note import Note, NoteContent
from quire.models.revision import NoteRevision

logger = logging.getLogger(__name__)


class NoteRevisionService:

    async def create_note_revision(self, session: AsyncSession, note: Note) -> NoteRevision:
        """Copy the note's current state into a new revision row."""
        content_row = await session.get(NoteContent, note.note_id)

        revision = NoteRevision(
            note_id=note.note_id,
            title=note.title,
            type=note.type,
            mime=note.mime,
            is_protected=note.is_protected,
            content=content_row.content if content_row is not None else None,
            date_last_edited=note.date_modified,
        )
        session.add(revision)
        await session.flush()

        logger.info(
            "Created revision %s of note %s (%d bytes)",
            revision.note_revision_id,
            note.note_id,
            len(revision.content or b""),
        )
        return revision

    async def protect_note_revisions(self, session: AsyncSession, note: Note) -> None:
        """Give every revision of the note the note's current protection flag."""
        await session.execute(
            update(NoteRevision)
            .where(NoteRevision.note_id == note.note_id)
            .values(is_protected=note.is_protected)
            .execution_options(synchronize_session="fetch")
        )

    async def get_revisions(self, session: AsyncSession, note_id: str) -> List[NoteRevision]:
        """Revisions of a note, oldest first; ties broken by revision id."""
        result = await session.execute(
            select(NoteRevision)
            .where(NoteRevision.note_id == note_id)
            .order_by(NoteRevision.date_created, NoteRevision.note_revision_id)
        )
        return list(result.scalars().all())
