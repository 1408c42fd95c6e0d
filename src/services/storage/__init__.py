"""Storage package."""
from typing import Optional

from .base import CommentChangeListener, DeckReviewRepository, DuplicateKeyError, StorageError
from .memory import InMemoryRepository

_repository: Optional[DeckReviewRepository] = None


def get_repository() -> DeckReviewRepository:
    """Get the process-wide repository instance."""
    global _repository
    if _repository is None:
        _repository = InMemoryRepository()
    return _repository


__all__ = [
    "CommentChangeListener",
    "DeckReviewRepository",
    "DuplicateKeyError",
    "StorageError",
    "InMemoryRepository",
    "get_repository",
]
