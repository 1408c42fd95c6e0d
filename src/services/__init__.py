"""Service layer for DeckReview."""

from .deck_review import DeckReviewService, get_deck_review_service
from .ai_feedback import FeedbackAIService, get_feedback_ai_service
from .storage import DeckReviewRepository, InMemoryRepository, get_repository

__all__ = [
    "DeckReviewService",
    "get_deck_review_service",
    "FeedbackAIService",
    "get_feedback_ai_service",
    "DeckReviewRepository",
    "InMemoryRepository",
    "get_repository",
]
