"""Full error hierarchy for tiptapify.

Every public error class inherits from TiptapifyError.  Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

The HTML importer and the Markdown exporter never raise for malformed
documents; they report non-fatal issues as
:class:`~tiptapify.models.ConversionWarning` values instead.  The errors
below belong to the surrounding import / export operations.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error the library can raise."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    ARCHIVE_ERROR = "ARCHIVE_ERROR"
    NOTE_ERROR = "NOTE_ERROR"
    ATTACHMENT_ERROR = "ATTACHMENT_ERROR"
    EXPORT_ERROR = "EXPORT_ERROR"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class TiptapifyError(Exception):
    """Base exception for all tiptapify errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Import errors
# ---------------------------------------------------------------------------

class TiptapifyValidationError(TiptapifyError):
    """An import payload failed validation (e.g. an empty Markdown file).

    Context keys: ``format``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class TiptapifyArchiveError(TiptapifyError):
    """A NoteStation archive could not be opened or has no usable
    ``config.json``.

    Context keys: ``source``, ``member``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.ARCHIVE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class TiptapifyNoteError(TiptapifyError):
    """A single note or notebook inside an archive could not be imported
    and ``skip_errors`` is disabled.

    Context keys: ``file``, ``kind``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NOTE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class TiptapifyAttachmentError(TiptapifyError):
    """The caller-supplied uploader failed for an attachment.

    Context keys: ``name``, ``ref``, ``md5``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.ATTACHMENT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Export errors
# ---------------------------------------------------------------------------

class TiptapifyExportError(TiptapifyError):
    """An export request could not be satisfied (e.g. no notes given).

    Context keys: ``note_count``, ``format``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.EXPORT_ERROR,
            message=message,
            context=context,
            cause=cause,
        )
