"""
Quire Backend: Note Service (Note Store)
=========================================

What:  Creates notes, reads them back, manages their labels and content.
Why:   Every write to notes, branches, attributes and note_contents goes
       through here, so the rest of the code never builds ORM rows itself.
How:   Stateless. Each method receives the AsyncSession it should use and
       only flushes; committing is the caller's transaction's job.

Design Decision:
    NoteService never opens its own transaction. ImageService decides which
    writes belong together (metadata on the request path, mime + content in
    the detached commit) and wraps them in Database.transaction().
"""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from quire.exceptions import NotFoundError
from quire.models.note import Attribute, Branch, Note, NoteContent, utc_now
from quire.schemas.note import NewNoteParams

logger = logging.getLogger(__name__)

ROOT_NOTE_ID = "root"

# Gap between sibling positions so notes can later be inserted in between
POSITION_STEP = 10


class NoteService:
    """
    Note store operations.

    Responsibilities:
        - ensure_root_note(): the tree's root, created on first start
        - create_new_note(): note + empty content row + branch under a parent
        - get_note(): lookup with not-found handling
        - set_label() / add_label() / get_labels(): note labels
        - save_note() / set_content() / get_content(): note persistence
    """

    async def ensure_root_note(self, session: AsyncSession) -> Note:
        """Return the root note, creating it when the database is empty."""
        root = await session.get(Note, ROOT_NOTE_ID)
        if root is None:
            root = Note(note_id=ROOT_NOTE_ID, title="root", type="text", mime="text/html")
            session.add(root)
            session.add(NoteContent(note_id=ROOT_NOTE_ID, content=b""))
            await session.flush()
            logger.info("Created root note")
        return root

    async def get_note(self, session: AsyncSession, note_id: str) -> Note:
        """
        Fetch a live (not deleted) note.

        Raises:
            NotFoundError: no such note, or it was deleted
        """
        note = await session.get(Note, note_id)
        if note is None or note.is_deleted:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    async def create_new_note(self, session: AsyncSession, params: NewNoteParams) -> Note:
        """
        Create a note as the last child of `params.parent_note_id`.

        Raises:
            NotFoundError: the parent note does not exist
        """
        await self.get_note(session, params.parent_note_id)

        note = Note(
            title=params.title,
            type=params.type,
            mime=params.mime,
            is_protected=params.is_protected,
        )
        session.add(note)
        await session.flush()

        session.add(NoteContent(note_id=note.note_id, content=params.content))
        session.add(
            Branch(
                note_id=note.note_id,
                parent_note_id=params.parent_note_id,
                note_position=await self._next_child_position(session, params.parent_note_id),
            )
        )
        await session.flush()

        logger.info(
            "Created note %s (%s, %s) under %s",
            note.note_id,
            note.type,
            note.mime,
            params.parent_note_id,
        )
        return note

    async def _next_child_position(self, session: AsyncSession, parent_note_id: str) -> int:
        result = await session.execute(
            select(func.max(Branch.note_position)).where(Branch.parent_note_id == parent_note_id)
        )
        current = result.scalar()
        return (current or 0) + POSITION_STEP

    async def get_labels(
        self,
        session: AsyncSession,
        note_id: str,
        name: Optional[str] = None,
    ) -> List[Attribute]:
        """Live labels of a note, optionally only those called `name`, by position."""
        query = select(Attribute).where(
            Attribute.note_id == note_id,
            Attribute.type == "label",
            Attribute.is_deleted.is_(False),
        )
        if name is not None:
            query = query.where(Attribute.name == name)
        result = await session.execute(query.order_by(Attribute.position))
        return list(result.scalars().all())

    async def add_label(
        self,
        session: AsyncSession,
        note: Note,
        name: str,
        value: str = "",
    ) -> Attribute:
        """Always append a new label, even when one with the same name exists."""
        existing = await self.get_labels(session, note.note_id)
        position = (max(a.position for a in existing) + POSITION_STEP) if existing else POSITION_STEP

        label = Attribute(note_id=note.note_id, type="label", name=name, value=value, position=position)
        session.add(label)
        await session.flush()
        return label

    async def set_label(
        self,
        session: AsyncSession,
        note: Note,
        name: str,
        value: str = "",
    ) -> Attribute:
        """Update the first label called `name`, or add it when missing."""
        existing = await self.get_labels(session, note.note_id, name=name)
        if not existing:
            return await self.add_label(session, note, name, value)

        label = existing[0]
        if label.value != value:
            label.value = value
            await session.flush()
        return label

    async def save_note(self, session: AsyncSession, note: Note) -> None:
        """Persist pending changes to the note row and bump its modification time."""
        note.date_modified = utc_now()
        session.add(note)
        await session.flush()

    async def set_content(self, session: AsyncSession, note: Note, content: bytes) -> None:
        """Replace the note content."""
        row = await session.get(NoteContent, note.note_id)
        now = utc_now()
        if row is None:
            session.add(NoteContent(note_id=note.note_id, content=content, date_modified=now))
        else:
            row.content = content
            row.date_modified = now
        note.date_modified = now
        await session.flush()

    async def get_content(self, session: AsyncSession, note_id: str) -> bytes:
        """
        Current content of a note.

        Raises:
            NotFoundError: the note has no content row
        """
        row = await session.get(NoteContent, note_id)
        if row is None:
            raise NotFoundError(resource="note content", resource_id=note_id)
        return row.content
