"""Share link and reviewer session endpoints."""
import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from src.models import ShareRecipient, ShareType
from src.services import get_deck_review_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["sharing"])


class RecipientInput(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    feedback_weight: Optional[float] = Field(default=None, ge=0)
    access_code: Optional[str] = None


class CreateShareLinkRequest(BaseModel):
    user_id: str
    share_type: ShareType = ShareType.FEEDBACK
    custom_weights: dict[str, float] = Field(default_factory=dict)
    target_roles: list[str] = Field(default_factory=list)
    focus_areas: list[str] = Field(default_factory=list)
    ai_analysis_enabled: bool = True
    requires_verification: bool = False
    allow_anonymous_feedback: bool = False
    expires_at: Optional[datetime] = None
    recipients: list[RecipientInput] = Field(default_factory=list)


class VerifyRequest(BaseModel):
    email_or_phone: str
    access_code: str


class ReviewerSessionRequest(BaseModel):
    session_id: str
    declared_role: Optional[str] = None
    reviewer_name: Optional[str] = None
    reviewer_email: Optional[str] = None
    expertise_level: Optional[str] = None
    user_id: Optional[str] = None


@router.post("/decks/{deck_id}/share-links", status_code=201)
async def create_share_link(deck_id: str, request: CreateShareLinkRequest) -> dict[str, Any]:
    """Create a share link, with optional role weights and named recipients."""
    service = get_deck_review_service()
    service.get_deck(deck_id)

    link = service.sharing.create_share_link(
        deck_id,
        request.user_id,
        share_type=request.share_type,
        custom_weights=request.custom_weights,
        target_roles=request.target_roles,
        focus_areas=request.focus_areas,
        ai_analysis_enabled=request.ai_analysis_enabled,
        requires_verification=request.requires_verification,
        allow_anonymous_feedback=request.allow_anonymous_feedback,
        expires_at=request.expires_at,
    )
    recipients = service.sharing.add_share_recipients(
        link.id,
        [ShareRecipient(share_link_id=link.id, **r.model_dump()) for r in request.recipients],
    )
    return {
        "share_link": link.model_dump(mode="json"),
        "recipients": [r.model_dump(mode="json", exclude={"access_code"}) for r in recipients],
    }


@router.get("/share/{token}")
async def get_shared_deck(token: str) -> dict[str, Any]:
    """Resolve a share token to its deck."""
    service = get_deck_review_service()
    resolved = service.sharing.get_deck_by_share_token(token)
    if resolved is None:
        raise HTTPException(status_code=404, detail="Share link not found or expired")

    deck, link = resolved
    return {
        "deck": deck.model_dump(mode="json"),
        "share_link": link.model_dump(mode="json"),
    }


@router.post("/share/{token}/verify")
async def verify_recipient(token: str, request: VerifyRequest) -> dict[str, Any]:
    service = get_deck_review_service()
    result = service.sharing.verify_recipient_access(token, request.email_or_phone, request.access_code)
    return result.model_dump()


@router.post("/share/{token}/sessions")
async def start_reviewer_session(token: str, request: ReviewerSessionRequest) -> dict[str, Any]:
    """Create or refresh the reviewer session for a client session id."""
    service = get_deck_review_service()
    if service.sharing.get_deck_by_share_token(token) is None:
        raise HTTPException(status_code=404, detail="Share link not found or expired")

    session = service.sharing.create_or_update_reviewer_session(
        token,
        request.session_id,
        declared_role=request.declared_role,
        reviewer_name=request.reviewer_name,
        reviewer_email=request.reviewer_email,
        expertise_level=request.expertise_level,
        user_id=request.user_id,
    )
    return session.model_dump(mode="json")
