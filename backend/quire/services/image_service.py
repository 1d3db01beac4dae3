"""
Quire Backend: Image Service (Persistence Coordinator)
=======================================================

What:  Saves uploaded images as new notes and replaces the image of existing
       notes. The expensive part (resize + commit) runs detached from the
       caller.
Who:   Whatever receives uploads (API layer, importers, scripts).

Flow (save_image):
    ┌────────────┐   ┌───────────────┐   ┌───────────────┐      ┌──────────────┐
    │  sanitize  │──▶│ create note   │──▶│ originalFile- │──┬──▶│ return       │
    │  filename  │   │ mime=unknown  │   │ Name label    │  │   │ SavedImage   │
    └────────────┘   └───────────────┘   └───────────────┘  │   └──────────────┘
                        (one transaction, committed)         │
                                                             ▼  detached task
                                          ┌──────────┐   ┌──────────────────────┐
                                          │ pipeline │──▶│ transaction:          │
                                          └──────────┘   │ mime, save, content   │
                                                         └──────────────────────┘

Flow (update_image):
    get note → revision snapshot → protect revisions → set originalFileName
    (one transaction, committed) → detached pipeline + commit as above.

State machine per upload:
    Uploaded → MetadataRecorded → [detached] Transforming → Committed

Consistency:
    The value returned to the caller is eventually consistent: the note has
    mime 'unknown' and empty content (or its previous mime and content on
    update) until the detached task commits. If that task fails, nothing is
    rolled forward or retried. The failure is logged by the error sink and
    surfaces on the returned task for callers that await it.
"""

import asyncio
import logging
from typing import Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from quire.database import Database
from quire.exceptions import CommitError
from quire.schemas.image import (
    ImageTunables,
    NoteResponse,
    ProcessedAsset,
    SavedImage,
    UploadedAsset,
)
from quire.schemas.note import NewNoteParams
from quire.services.filename import sanitize_filename
from quire.services.image_format import derive_mime
from quire.services.image_pipeline import TransformPipeline
from quire.services.note_service import NoteService
from quire.services.option_service import OptionService
from quire.services.protected_session_service import ProtectedSessionService
from quire.services.revision_service import NoteRevisionService

logger = logging.getLogger(__name__)

ORIGINAL_FILE_NAME_LABEL = "originalFileName"
PLACEHOLDER_MIME = "unknown"


def image_url(note_id: str, file_name: str) -> str:
    return f"api/images/{note_id}/{file_name}"


class ImageService:
    """
    Coordinates note metadata, the transform pipeline and the final commit.

    Collaborators are injected; the service holds no global state besides the
    set of detached tasks that have not finished yet.
    """

    def __init__(
        self,
        database: Database,
        note_service: NoteService,
        revision_service: NoteRevisionService,
        option_service: OptionService,
        protected_session: ProtectedSessionService,
        pipeline: Optional[TransformPipeline] = None,
    ):
        self.database = database
        self.note_service = note_service
        self.revision_service = revision_service
        self.option_service = option_service
        self.protected_session = protected_session
        self.pipeline = pipeline or TransformPipeline(self._load_tunables)
        # Strong references: the event loop only keeps weak ones to tasks
        self._pending: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def _load_tunables(self) -> ImageTunables:
        async with self.database.transaction() as session:
            return await self.option_service.get_image_tunables(session)

    # ── Entry points ──────────────────────────────────────────────────────

    async def save_image(
        self,
        parent_note_id: str,
        content: bytes,
        original_name: str,
        shrink_requested: bool,
    ) -> SavedImage:
        """
        Create an image note under `parent_note_id` and process it detached.

        Returns:
            SavedImage. Its `note.mime` is 'unknown' and the content empty
            until `commit_task` completes.

        Raises:
            NotFoundError: the parent note does not exist
        """
        logger.info("Saving image %s", original_name)
        asset = UploadedAsset(content=content, original_name=original_name)
        file_name = sanitize_filename(original_name)

        async with self.database.transaction() as session:
            parent = await self.note_service.get_note(session, parent_note_id)

            note = await self.note_service.create_new_note(
                session,
                NewNoteParams(
                    parent_note_id=parent_note_id,
                    title=file_name,
                    type="image",
                    mime=PLACEHOLDER_MIME,
                    content=b"",
                    is_protected=(
                        parent.is_protected
                        and self.protected_session.is_protected_session_available()
                    ),
                ),
            )
            await self.note_service.add_label(session, note, ORIGINAL_FILE_NAME_LABEL, original_name)

        task = self._launch(note.note_id, asset, shrink_requested)

        return SavedImage(
            file_name=file_name,
            note=NoteResponse.model_validate(note),
            note_id=note.note_id,
            url=image_url(note.note_id, file_name),
            commit_task=task,
        )

    async def update_image(
        self,
        note_id: str,
        content: bytes,
        original_name: str,
    ) -> asyncio.Task:
        """
        Replace the image of an existing note, keeping the old one as a revision.

        The revision is committed before the detached task is started.

        Returns:
            The detached process-and-commit task.

        Raises:
            NotFoundError: the note does not exist
        """
        logger.info("Updating image %s: %s", note_id, original_name)
        asset = UploadedAsset(content=content, original_name=original_name)

        async with self.database.transaction() as session:
            note = await self.note_service.get_note(session, note_id)

            await self.revision_service.create_note_revision(session, note)
            await self.revision_service.protect_note_revisions(session, note)

            await self.note_service.set_label(session, note, ORIGINAL_FILE_NAME_LABEL, original_name)

        return self._launch(note_id, asset, shrink_requested=True)

    async def wait_for_pending(self) -> None:
        """Wait until every detached task has finished (used at shutdown)."""
        if self._pending:
            logger.info("Waiting for %d pending image commit(s)", len(self._pending))
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # ── Detached work ─────────────────────────────────────────────────────

    def _launch(self, note_id: str, asset: UploadedAsset, shrink_requested: bool) -> asyncio.Task:
        task = asyncio.create_task(
            self._process_and_commit(note_id, asset, shrink_requested),
            name=f"image-commit-{note_id}",
        )
        self._pending.add(task)
        task.add_done_callback(self._on_commit_done)
        return task

    def _on_commit_done(self, task: asyncio.Task) -> None:
        """Error sink for detached commits."""
        self._pending.discard(task)

        if task.cancelled():
            logger.warning("Image commit %s was cancelled", task.get_name())
            return

        exc = task.exception()
        if exc is not None:
            logger.error(
                "Image commit %s failed: %s",
                task.get_name(),
                exc,
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def _process_and_commit(
        self,
        note_id: str,
        asset: UploadedAsset,
        shrink_requested: bool,
    ) -> ProcessedAsset:
        processed = await self.pipeline.process(
            asset.content,
            asset.original_name,
            shrink_requested,
        )
        mime = derive_mime(processed.format.extension)

        try:
            async with self.database.transaction() as session:
                note = await self.note_service.get_note(session, note_id)
                note.mime = mime
                await self.note_service.save_note(session, note)

                await self.note_service.set_content(session, note, processed.content)
        except SQLAlchemyError as e:
            raise CommitError(
                note_id=note_id,
                context={
                    "original_name": asset.original_name,
                    "error_type": type(e).__name__,
                },
            ) from e

        logger.info(
            "Committed image note %s: %s, %d bytes (uploaded %d)",
            note_id,
            mime,
            len(processed.content),
            len(asset.content),
        )
        return processed
