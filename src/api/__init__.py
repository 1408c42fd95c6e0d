"""API routes for DeckReview."""

from .routes import decks, comments, proposals, sharing

__all__ = [
    "decks",
    "comments",
    "proposals",
    "sharing",
]
