# Importing the package registers every model with Base.metadata
from quire.models.note import Attribute, Branch, Note, NoteContent
from quire.models.option import Option
from quire.models.revision import NoteRevision

__all__ = ["Attribute", "Branch", "Note", "NoteContent", "NoteRevision", "Option"]
