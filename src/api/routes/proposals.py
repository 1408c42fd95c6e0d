"""AI proposal endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from src.models import ProposalStatus
from src.services import get_deck_review_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["proposals"])


class GenerateProposalsRequest(BaseModel):
    comment_ids: Optional[list[str]] = None


class UpdateStatusRequest(BaseModel):
    status: ProposalStatus
    notes: Optional[str] = None


@router.post("/decks/{deck_id}/slides/{slide_id}/proposals/generate")
async def generate_proposals(
    deck_id: str,
    slide_id: str,
    request: Optional[GenerateProposalsRequest] = None,
) -> dict[str, Any]:
    """
    Generate change proposals for a slide from its open comments.

    Returns only the proposals created by this call; duplicates of pending
    proposals are skipped.
    """
    service = get_deck_review_service()
    if not service.is_ai_available:
        return {"available": False, "proposals": []}

    proposals = await service.generate_proposals(
        deck_id, slide_id, comment_ids=request.comment_ids if request else None
    )
    return {
        "available": True,
        "proposals": [p.model_dump(mode="json") for p in proposals],
    }


@router.get("/decks/{deck_id}/proposals")
async def list_proposals(
    deck_id: str,
    slide_id: Optional[str] = None,
    status: Optional[ProposalStatus] = None,
) -> list[dict[str, Any]]:
    """List a deck's proposals, newest first."""
    service = get_deck_review_service()
    return [p.model_dump(mode="json") for p in service.list_proposals(deck_id, slide_id, status)]


@router.post("/proposals/{proposal_id}/status")
async def update_proposal_status(proposal_id: str, request: UpdateStatusRequest) -> dict[str, Any]:
    """Accept, reject, modify or archive a pending proposal. Accepting applies it."""
    service = get_deck_review_service()
    proposal = service.update_proposal_status(proposal_id, request.status, request.notes)
    return proposal.model_dump(mode="json")
