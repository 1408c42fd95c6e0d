"""
Deck Review Service
Facade over feedback, sharing and the proposal pipeline.
"""

from .service import DeckReviewService, get_deck_review_service

__all__ = [
    "DeckReviewService",
    "get_deck_review_service",
]
