"""Pydantic model for a single CANPi configuration attribute.

An attribute definition carries everything a settings panel needs to show one
field: its label, help text, live and default values, the regular expression
the value is expected to match, and whether the field may be edited.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Visibility(str, Enum):
    """How an attribute is presented.

    The values are the ``action`` strings used in definition documents.

    Attributes:
        EDITABLE: Shown and editable by the user.
        VIEW_ONLY: Shown read-only.
        HIDDEN: Internal field, never shown.
    """

    EDITABLE = "Edit"
    VIEW_ONLY = "Display"
    HIDDEN = "Hide"


class Attribute(BaseModel):
    """One configurable item of the CANPi configuration.

    ``current`` and ``default`` are always text, whatever the logical type of
    the setting. ``format`` is stored for the presentation layer; it is not
    applied here.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    prompt: str = Field(..., description="Display label")
    tooltip: str = Field(..., description="Help text")
    current: str = Field(..., description="Live value")
    default: str = Field(..., description="Original value")
    format: str = Field(..., description="Regular expression the value should match")
    visibility: Visibility = Field(..., alias="action")

    def with_current(self, value: str) -> "Attribute":
        """Return a copy of this attribute with ``current`` replaced."""
        return self.model_copy(update={"current": value})

    def to_document(self) -> dict[str, Any]:
        """Return the attribute as it appears in a definition document."""
        return self.model_dump(mode="json", by_alias=True)
