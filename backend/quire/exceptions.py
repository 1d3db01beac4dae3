"""
Quire Backend: Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions for the different failure scenarios.
How:   Each exception class carries a message and optional context dict.
       The context is meant for logs, the message for whoever called us.
Who:   Raised by services; caught by the image pipeline (decode failures) or
       by the detached commit's error sink (commit failures).

Exception Hierarchy:
    QuireError (base)
    ├── ValidationError     → caller sent something unusable
    ├── NotFoundError       → note / option does not exist
    ├── DatabaseError       → unexpected persistence failure
    ├── ImageDecodeError    → bytes are not a decodable raster image
    └── CommitError         → detached image commit transaction failed

Recovery summary:
    ImageDecodeError is recovered locally by the pipeline (original bytes kept).
    CommitError is never recovered: it is raised out of the detached task and
    reported by the error-logging sink. The note keeps its previous mime and
    content.
"""

from typing import Any, Dict, Optional


class QuireError(Exception):
    """
    Base exception for all Quire application errors.

    Attributes:
        message:  Human-readable error description
        context:  Additional debug info (logged, never shown to end users)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(QuireError):
    """Raised when input fails validation (e.g. a non-integer numeric option)."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(QuireError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; the service layer converts that
    None into this exception so callers never have to check for it.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(QuireError):
    """Raised when database operations fail unexpectedly."""

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ImageDecodeError(QuireError):
    """
    Raised by the resizer when the bytes cannot be decoded as a raster image.

    When:   Truncated uploads, formats Pillow has no decoder for, or payloads
            that only look like images (a text file renamed to .png).
    """

    def __init__(
        self,
        message: str = "Image could not be decoded",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class CommitError(QuireError):
    """
    Raised when the transaction committing a processed image fails.

    What:    Setting the mime, saving the note or writing the content failed,
             and the whole write set was rolled back.
    When:    Inside the detached image task, after the caller already returned.
    Handled: Not retried. The task finishes with this exception and the
             ImageService error sink logs it with note id and filename.
    """

    def __init__(
        self,
        note_id: Optional[str] = None,
        message: str = "Failed to commit processed image",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if note_id:
            ctx["note_id"] = note_id
            message = f"{message} for note '{note_id}'"
        super().__init__(message=message, context=ctx)
        self.note_id = note_id
