"""
Invocation Request Schema
=========================

Pydantic models for the inbound invocation payload and the
immutable BundleRequest handed to the pipeline.

Input Contract:
    {
        "item_code": "A1",
        "image_count": "3",
        "body": {
            "size_table": {"head": [...], "body": [[...], ...]},
            "size_description": "...",
            "size_zh": "S，M，L"
        }
    }

Rules:
    - ``body`` absent or null means no size image
    - ``size_table.head`` is accepted but never used; headers are
      always recomputed from ``size_zh``
    - ``size_description`` is accepted and ignored

Example:
    from image_bundler.models.request import ItemSize

    item_size = ItemSize.model_validate(payload["body"])
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# Characters that would break a flat "{identifier}_{n}.jpeg" key
_FORBIDDEN_IDENTIFIER_CHARS = ("/", "\\", "\x00")


class SizeTable(BaseModel):
    """
    Tabular size data as supplied by the caller.

    Attributes:
        head: Header labels (discarded, headers come from size_zh)
        body: Table rows, each an ordered list of cell strings
    """

    head: List[str]
    body: List[List[str]]


class ItemSize(BaseModel):
    """
    The ``body`` object of an invocation payload.

    Attributes:
        size_table: Optional tabular size data
        size_description: Free text, ignored by the pipeline
        size_zh: Label string, e.g. "S，M，L"
    """

    size_table: Optional[SizeTable] = None
    size_description: Optional[str] = None
    size_zh: str


class TableSizeSpec(BaseModel):
    """Size information rendered as a table."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["table"] = "table"
    headers: List[str]
    rows: List[List[str]]


class SingleLineSizeSpec(BaseModel):
    """Size information rendered as one line of text."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single_line"] = "single_line"
    text: str


SizeSpec = Annotated[
    Union[TableSizeSpec, SingleLineSizeSpec],
    Field(discriminator="kind"),
]


class BundleRequest(BaseModel):
    """
    Validated, immutable request for one item bundle.

    Attributes:
        identifier: Item code, used verbatim in storage keys
        image_count: Number of candidate photo slots (1..image_count)
        size_spec: Optional size information to render
    """

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1)
    image_count: int = Field(..., ge=0)
    size_spec: Optional[SizeSpec] = None

    @field_validator("identifier")
    @classmethod
    def _identifier_is_key_safe(cls, value: str) -> str:
        if value in (".", ".."):
            raise ValueError("identifier must not be a relative path segment")
        for char in _FORBIDDEN_IDENTIFIER_CHARS:
            if char in value:
                raise ValueError(f"identifier must not contain {char!r}")
        return value


def photo_key(identifier: str, slot: int) -> str:
    """Storage key of one photo slot."""
    return f"{identifier}_{slot}.jpeg"


def bundle_key(identifier: str) -> str:
    """Storage key of the published bundle."""
    return f"{identifier}.zip"
