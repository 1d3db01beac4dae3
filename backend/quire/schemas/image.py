"""
Quire Backend: Image Pydantic Schemas
======================================

What:  Value objects that flow through the image pipeline and the result
       returned to whoever saved an image.
Why:   Pipeline stages hand each other immutable, validated objects instead of
       loose tuples, so a stage can never mutate what a previous one produced.

Flow:
    UploadedAsset ──▶ TransformPipeline ──▶ ProcessedAsset ──▶ ImageService
                                                                  │
                                                 SavedImage ◀─────┘
"""

import asyncio
from typing import Optional

from pydantic import BaseModel, Field


class ImageFormat(BaseModel):
    """
    What:  Detected container format of a byte stream.
    Values: 'svg', a raster extension ('png', 'jpg', 'gif', 'webp', 'bmp',
            'tif', ...) or the optimistic default 'jpg'. Never empty.
    """
    extension: str = Field(min_length=1, description="Lowercase file extension without dot")

    model_config = {"frozen": True}


class UploadedAsset(BaseModel):
    """Raw upload as received: consumed exactly once by the pipeline."""
    content: bytes = Field(description="Uploaded bytes, untouched")
    original_name: str = Field(description="Filename as sent by the client")

    model_config = {"frozen": True}


class ProcessedAsset(BaseModel):
    """
    What:  Pipeline output, ready to be written into a note.
    Invariant: when shrinking was attempted, len(content) never exceeds the
               uploaded length; when it was not, content is the upload itself.
    """
    content: bytes = Field(description="Final bytes to store")
    format: ImageFormat = Field(description="Format re-detected from the final bytes")

    model_config = {"frozen": True}


class ImageTunables(BaseModel):
    """Resize settings read from the option store right before shrinking."""
    max_width_height: int = Field(ge=1, description="Longest edge in pixels")
    jpeg_quality: int = Field(ge=0, le=100, description="JPEG quality 0-100")

    model_config = {"frozen": True}


class NoteResponse(BaseModel):
    """Summary of the note an image was saved into."""
    note_id: str = Field(description="Identifier of the image note")
    title: str = Field(description="Sanitized file name used as the note title")
    type: str = Field(description="Note type, always 'image' here")
    mime: str = Field(description="Mime at the time of the response ('unknown' until committed)")
    is_protected: bool = Field(description="Whether the note is protected")

    model_config = {"from_attributes": True}


class SavedImage(BaseModel):
    """
    What:  Returned by ImageService.save_image before the image is processed.
    Note:  Eventually consistent. `note.mime` is still 'unknown' and the note
           content is empty until `commit_task` finishes. Await the task to
           observe the committed state.
    """
    file_name: str = Field(description="Sanitized file name")
    note: NoteResponse = Field(description="The newly created image note")
    note_id: str = Field(description="Same as note.note_id")
    url: str = Field(description="Relative URL: api/images/{note_id}/{file_name}")
    commit_task: Optional[asyncio.Task] = Field(
        default=None,
        exclude=True,
        description="Detached process-and-commit task (result channel)",
    )

    model_config = {"arbitrary_types_allowed": True}
