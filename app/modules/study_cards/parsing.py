"""Recover and validate the card array from a free-form model reply.

Models often wrap the JSON in prose or code fences. Rather than a greedy
regex, the reply is scanned with ``json.JSONDecoder.raw_decode`` at every
``[`` so that only structurally balanced arrays are considered.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from pydantic import ValidationError

from app.core.logging import get_logger
from app.modules.study_cards.errors import EmptyResultError, ResponseFormatError
from app.modules.study_cards.models.cards import StudyCard

logger = get_logger(__name__)

MAX_CARDS = 10

_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class Parsed:
    value: Any


@dataclass(frozen=True)
class NotFound:
    pass


@dataclass(frozen=True)
class Malformed:
    error: str


ExtractionResult = Union[Parsed, NotFound, Malformed]


def _is_card_like(value: list) -> bool:
    return bool(value) and all(isinstance(item, dict) for item in value)


def extract_card_array(reply: str) -> ExtractionResult:
    """Find the first balanced JSON array in ``reply``.

    A non-empty array of objects is preferred over an earlier empty or scalar
    array (e.g. a ``[1]`` citation in surrounding prose). Without any ``[`` the whole reply
    is parsed as-is.
    """
    first_array: list | None = None
    last_error: str | None = None
    saw_bracket = False

    pos = reply.find("[")
    while pos != -1:
        saw_bracket = True
        try:
            value, _ = _decoder.raw_decode(reply, pos)
        except json.JSONDecodeError as exc:
            last_error = str(exc)
        else:
            if isinstance(value, list):
                if _is_card_like(value):
                    return Parsed(value)
                if first_array is None:
                    first_array = value
        pos = reply.find("[", pos + 1)

    if first_array is not None:
        return Parsed(first_array)
    if saw_bracket:
        return Malformed(last_error or "no balanced array found")

    try:
        return Parsed(json.loads(reply))
    except json.JSONDecodeError:
        return NotFound()


def validate_cards(value: Any, max_cards: int = MAX_CARDS) -> list[StudyCard]:
    """Validate the parsed value into at most ``max_cards`` cards.

    Elements that do not validate as a card are dropped; the batch fails only
    when none survive.
    """
    if not isinstance(value, list):
        raise ResponseFormatError()
    if not value:
        raise EmptyResultError()

    if len(value) > max_cards:
        logger.info("Truncating %d cards to %d", len(value), max_cards)
        value = value[:max_cards]

    cards: list[StudyCard] = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            logger.warning("Dropping card #%d: not an object", index)
            continue
        try:
            cards.append(StudyCard.model_validate(item))
        except ValidationError as exc:
            logger.warning(
                "Dropping card #%d: %d validation error(s)", index, exc.error_count()
            )

    if not cards:
        raise ResponseFormatError()
    return cards


def parse_cards(reply: str, max_cards: int = MAX_CARDS) -> list[StudyCard]:
    result = extract_card_array(reply)
    if isinstance(result, Malformed):
        logger.error("Malformed JSON in model reply: %s", result.error)
        raise ResponseFormatError()
    if isinstance(result, NotFound):
        logger.error("No JSON array found in model reply (%d chars)", len(reply))
        raise ResponseFormatError()
    return validate_cards(result.value, max_cards=max_cards)
