"""
Quire Backend: Note Schemas
============================

What:  Input contract for creating notes through NoteService.
"""

from pydantic import BaseModel, Field


class NewNoteParams(BaseModel):
    """
    What:  Everything NoteService.create_new_note needs.
    Note:  `mime` may be a placeholder ('unknown') when the real type is only
           known after processing, as for uploaded images.
    """
    parent_note_id: str = Field(min_length=1, description="Existing note to create the new note under")
    title: str = Field(description="Note title")
    type: str = Field(default="text", description="Note type: text, image, file, ...")
    mime: str = Field(default="text/html", description="Initial mime")
    content: bytes = Field(default=b"", description="Initial content")
    is_protected: bool = Field(default=False, description="Whether the note is protected")
