"""
Bundle Outcome Models
=====================

The only state returned across the service boundary.

Output Contract:
    {"result": "ok", "message": ""}
    {"result": "error", "message": "RENDER_ERROR: render service returned 503"}

The error kind is additionally exposed through the hosting transport
(``error_type`` for function-style invocation, a response header for HTTP).
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from image_bundler.errors import BundleError, ErrorKind


class InvocationResponse(BaseModel):
    """
    Outbound response body.

    Attributes:
        result: "ok" or "error"
        message: Empty on success, short cause otherwise
    """

    result: Literal["ok", "error"]
    message: str = ""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"result": "ok", "message": ""},
        }
    )


class BundleOutcome(BaseModel):
    """
    Tagged result of one invocation.

    Attributes:
        ok: True when the bundle was published
        error_kind: Failure classification (None on success)
        message: Failure cause (empty on success)
        bundle_key: Published key (success only)
        entry_names: Archive entry names (success only, diagnostics)
    """

    model_config = ConfigDict(frozen=True)

    ok: bool
    error_kind: Optional[ErrorKind] = None
    message: str = ""
    bundle_key: Optional[str] = None
    entry_names: List[str] = Field(default_factory=list)

    @classmethod
    def success(cls, bundle_key: str, entry_names: List[str]) -> "BundleOutcome":
        return cls(ok=True, bundle_key=bundle_key, entry_names=list(entry_names))

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "BundleOutcome":
        return cls(ok=False, error_kind=kind, message=message)

    @classmethod
    def from_error(cls, error: BundleError) -> "BundleOutcome":
        return cls.failure(error.kind, str(error))

    def to_response(self) -> InvocationResponse:
        """Convert to the outbound {result, message} body."""
        if self.ok:
            return InvocationResponse(result="ok", message="")
        return InvocationResponse(result="error", message=self.message)
