from .cards import StudyCard

__all__ = ["StudyCard"]
