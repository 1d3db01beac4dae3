"""
Quire Backend: Note Revision Service Tests
===========================================

What we test:
    ✅ A snapshot copies the note's fields and current content
    ✅ Revisions created at the same instant come back in a stable order
"""

from datetime import datetime, timezone

import pytest

from quire.models.revision import NoteRevision
from quire.schemas.note import NewNoteParams
from quire.services.note_service import ROOT_NOTE_ID


@pytest.mark.asyncio
async def test_snapshot_copies_note_and_content(container):
    async with container.database.transaction() as session:
        note = await container.note_service.create_new_note(
            session,
            NewNoteParams(parent_note_id=ROOT_NOTE_ID, title="pic", type="image", mime="image/png", content=b"px"),
        )
        revision = await container.revision_service.create_note_revision(session, note)

    assert revision.note_id == note.note_id
    assert (revision.title, revision.type, revision.mime) == ("pic", "image", "image/png")
    assert revision.content == b"px"


@pytest.mark.asyncio
async def test_same_timestamp_revisions_are_ordered_by_id(container):
    created = datetime(2024, 1, 1, tzinfo=timezone.utc)

    async with container.database.transaction() as session:
        note = await container.note_service.create_new_note(
            session, NewNoteParams(parent_note_id=ROOT_NOTE_ID, title="pic")
        )
        for revision_id in ("zzzzzzzzzzzz", "aaaaaaaaaaaa", "mmmmmmmmmmmm"):
            session.add(
                NoteRevision(
                    note_revision_id=revision_id,
                    note_id=note.note_id,
                    type="text",
                    mime="text/html",
                    date_last_edited=created,
                    date_created=created,
                )
            )

    async with container.database.transaction() as session:
        revisions = await container.revision_service.get_revisions(session, note.note_id)

    assert [r.note_revision_id for r in revisions] == ["aaaaaaaaaaaa", "mmmmmmmmmmmm", "zzzzzzzzzzzz"]
