"""Study cards module exports."""

from .models.cards import StudyCard
from .pipeline import StudyCardPipeline, StudyCardResult, generate_study_cards

__all__ = [
    "StudyCard",
    "StudyCardPipeline",
    "StudyCardResult",
    "generate_study_cards",
]
