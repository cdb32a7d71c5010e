from __future__ import annotations

from pydantic import BaseModel, Field

from app.modules.study_cards.models.cards import StudyCard


class StudyCardsResponse(BaseModel):
    model: str = Field(..., description="Gemini model that produced the cards")
    cards: list[StudyCard] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    detail: str
