"""Deck API endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Query

from src.models import Deck
from src.services import get_deck_review_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/decks", tags=["decks"])


@router.get("/{deck_id}")
async def get_deck(deck_id: str) -> dict[str, Any]:
    """Get a deck with its sections and components."""
    service = get_deck_review_service()
    return service.get_deck(deck_id).model_dump(mode="json")


@router.put("/{deck_id}")
async def save_deck(
    deck_id: str,
    deck: Deck,
    expected_version: Optional[int] = Query(default=None, ge=0),
) -> dict[str, Any]:
    """
    Replace a deck document.

    When ``expected_version`` is given the save fails with 409 if the deck
    has been saved by someone else in the meantime.
    """
    service = get_deck_review_service()
    deck.id = deck_id
    return service.save_deck(deck, expected_version=expected_version).model_dump(mode="json")
