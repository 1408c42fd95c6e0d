"""Core configuration module for DeckReview."""

from .config import Settings, get_settings
from .logging import setup_logging, get_logger
from .exceptions import (
    DeckReviewError,
    DeckNotFoundError,
    SlideNotFoundError,
    ProposalNotFoundError,
    CommentNotFoundError,
    InvalidTransitionError,
    ProposalPersistenceError,
    CommentPersistenceError,
    ProposalApplyError,
    ConcurrentModificationError,
    ShareLinkError,
)

__all__ = [
    "Settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "DeckReviewError",
    "DeckNotFoundError",
    "SlideNotFoundError",
    "ProposalNotFoundError",
    "CommentNotFoundError",
    "InvalidTransitionError",
    "ProposalPersistenceError",
    "CommentPersistenceError",
    "ProposalApplyError",
    "ConcurrentModificationError",
    "ShareLinkError",
]
