"""
Bundle Errors
=============

Error kinds and exception hierarchy for the bundle pipeline.

Every failed invocation carries exactly ONE error kind that names the
stage which failed. Absent photo slots are not errors and have no kind.

Rules:
    - One exception class per kind
    - Kinds are stable wire values (exposed to callers)
    - Free-text detail goes in the message, never in the kind
    - Underlying library exceptions are chained with ``raise ... from exc``
"""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Machine-readable failure classification.

    Attributes:
        MISSING_FIELD: item_code or image_count absent from the payload
        FIELD_PARSE_ERROR: image_count or size body has the wrong shape
        OBJECT_RETRIEVAL_ERROR: Non-absent failure fetching a photo or font
        RENDER_ERROR: Size image synthesis failed
        ARCHIVE_ERROR: Archive construction failed structurally
        PUBLISH_ERROR: Writing the final bundle failed
        SCRATCH_IO_ERROR: Scratch buffer/file operation failed
    """

    # Request decoding
    MISSING_FIELD = "MISSING_FIELD"
    FIELD_PARSE_ERROR = "FIELD_PARSE_ERROR"

    # Pipeline stages
    OBJECT_RETRIEVAL_ERROR = "OBJECT_RETRIEVAL_ERROR"
    RENDER_ERROR = "RENDER_ERROR"
    ARCHIVE_ERROR = "ARCHIVE_ERROR"
    PUBLISH_ERROR = "PUBLISH_ERROR"

    # Local resources
    SCRATCH_IO_ERROR = "SCRATCH_IO_ERROR"

    @property
    def is_request_error(self) -> bool:
        """True for kinds caused by the inbound payload itself."""
        return self in (ErrorKind.MISSING_FIELD, ErrorKind.FIELD_PARSE_ERROR)


class BundleError(Exception):
    """
    Base class for every fatal pipeline error.

    Attributes:
        kind: ErrorKind exposed to callers
        message: Short human-readable cause
    """

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class MissingFieldError(BundleError):
    """Raised when a required invocation field is absent."""

    kind = ErrorKind.MISSING_FIELD


class FieldParseError(BundleError):
    """Raised when an invocation field cannot be parsed."""

    kind = ErrorKind.FIELD_PARSE_ERROR


class ObjectRetrievalError(BundleError):
    """Raised when fetching a photo or the font asset fails (not 'absent')."""

    kind = ErrorKind.OBJECT_RETRIEVAL_ERROR


class RenderError(BundleError):
    """Raised when the size image cannot be rendered."""

    kind = ErrorKind.RENDER_ERROR


class ArchiveError(BundleError):
    """Raised when the archive writer reports a structural error."""

    kind = ErrorKind.ARCHIVE_ERROR


class PublishError(BundleError):
    """Raised when the finished bundle cannot be stored."""

    kind = ErrorKind.PUBLISH_ERROR


class ScratchIOError(BundleError):
    """Raised when a scratch buffer or temp file operation fails."""

    kind = ErrorKind.SCRATCH_IO_ERROR
