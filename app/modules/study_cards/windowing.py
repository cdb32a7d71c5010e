"""Bound extracted text to a fixed character budget.

Long documents keep their head and tail, where introductions and conclusions
usually carry the densest concepts. Truncation is purely by character offset.
"""

from __future__ import annotations

DEFAULT_TEXT_BUDGET = 4000
WINDOW_SEPARATOR = "\n\n...\n\n"


def window_text(
    text: str,
    budget: int = DEFAULT_TEXT_BUDGET,
    separator: str = WINDOW_SEPARATOR,
) -> str:
    """Return ``text`` unchanged if it fits, else head + separator + tail."""
    if budget < 2:
        raise ValueError("budget must be at least 2 characters")
    if len(text) <= budget:
        return text
    half = budget // 2
    return text[:half] + separator + text[-half:]
