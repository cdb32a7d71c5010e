"""Pydantic model for a single study card.

The wire format uses ``pageNumber`` (camelCase) to match what the model is
asked to emit; Python code uses ``page_number``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_PAGE_DIGITS = 6


class StudyCard(BaseModel):
    """One study card derived from the source document."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    emoji: str = Field(min_length=1)
    page_number: int | None = Field(default=None, alias="pageNumber")

    @field_validator("title", "content", "emoji", mode="before")
    @classmethod
    def _require_text(cls, value: Any) -> Any:
        # Reject numbers, lists, etc. rather than stringifying them
        if not isinstance(value, str):
            raise ValueError("must be a string")
        return value

    @field_validator("page_number", mode="before")
    @classmethod
    def _coerce_page(cls, value: Any) -> int | None:
        """Best-effort page hint: positive integers survive, everything else is None."""
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, str):
            value = value.strip()
            if not value.isdecimal() or len(value) > MAX_PAGE_DIGITS:
                return None
            try:
                value = int(value)
            except ValueError:
                return None
        if isinstance(value, float):
            if not value.is_integer():
                return None
            value = int(value)
        if isinstance(value, int) and value > 0:
            return value
        return None
