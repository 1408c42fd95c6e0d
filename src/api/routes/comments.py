"""Reviewer comment and insight endpoints."""
import logging
from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel, Field

from src.models import CommentStatus, FeedbackCategory, NewComment
from src.services import get_deck_review_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["comments"])


class AddCommentRequest(NewComment):
    """New comment plus the share context it was left through."""
    share_token: Optional[str] = None
    reviewer_session_id: Optional[str] = None


class UpdateCommentRequest(BaseModel):
    text_content: Optional[str] = Field(default=None, min_length=1, max_length=10000)
    feedback_category: Optional[FeedbackCategory] = None
    status: Optional[CommentStatus] = None


class InsightsRequest(BaseModel):
    share_token: Optional[str] = None


@router.get("/decks/{deck_id}/comments")
async def list_comments(deck_id: str, slide_id: Optional[str] = None) -> list[dict[str, Any]]:
    """List a deck's comments, optionally for one slide, oldest first."""
    service = get_deck_review_service()
    return [c.model_dump(mode="json") for c in service.feedback.get_comments(deck_id, slide_id)]


@router.post("/decks/{deck_id}/comments", status_code=201)
async def add_comment(deck_id: str, request: AddCommentRequest) -> dict[str, Any]:
    """
    Add a reviewer comment.

    The comment is classified by the AI service when available and weighted
    by the reviewer's declared role on the share link.
    """
    service = get_deck_review_service()
    new_comment = NewComment(**request.model_dump(exclude={"share_token", "reviewer_session_id"}))
    comment = await service.feedback.add_comment(
        deck_id,
        new_comment,
        share_token=request.share_token,
        reviewer_session_id=request.reviewer_session_id,
    )
    return comment.model_dump(mode="json")


@router.patch("/comments/{comment_id}")
async def update_comment(comment_id: str, request: UpdateCommentRequest) -> dict[str, Any]:
    service = get_deck_review_service()
    comment = service.feedback.update_comment(
        comment_id,
        text_content=request.text_content,
        feedback_category=request.feedback_category,
        status=request.status,
    )
    return comment.model_dump(mode="json")


@router.delete("/comments/{comment_id}")
async def delete_comment(comment_id: str) -> dict[str, Any]:
    service = get_deck_review_service()
    service.feedback.delete_comment(comment_id)
    return {"deleted": True, "id": comment_id}


@router.post("/decks/{deck_id}/insights")
async def generate_insights(deck_id: str, request: Optional[InsightsRequest] = None) -> dict[str, Any]:
    """Aggregate the deck's comments and store an insight snapshot."""
    service = get_deck_review_service()
    insight = service.feedback.generate_and_store_insights(
        deck_id, share_token=request.share_token if request else None
    )
    return {"insight": insight.model_dump(mode="json") if insight else None}
