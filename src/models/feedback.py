"""Reviewer feedback models: comments, reviewer sessions, share links, insights."""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from .deck import new_id, utc_now


class CommentStatus(str, Enum):
    OPEN = "Open"
    RESOLVED = "Resolved"
    ARCHIVED = "Archived"


class FeedbackCategory(str, Enum):
    CONTENT = "Content"
    FORM = "Form"
    GENERAL = "General"


class ShareType(str, Enum):
    FEEDBACK = "feedback"
    PRESENTATION = "presentation"
    REVIEW = "review"


class NewComment(BaseModel):
    """Reviewer-supplied fields for a new comment."""

    slide_id: str = Field(..., description="Slide the comment is attached to")
    element_id: Optional[str] = Field(default=None, description="Component the comment targets")
    parent_comment_id: Optional[str] = None
    author_user_id: Optional[str] = Field(default=None, description="Authenticated author")
    author_display_name: Optional[str] = Field(default=None, description="Anonymous display name")
    text_content: str = Field(..., min_length=1, max_length=10000)
    comment_type: str = Field(default="General", description="Suggestion, Concern, Question, Praise or General")
    urgency: Optional[str] = None
    declared_role: Optional[str] = Field(default=None, description="Role the reviewer declared")
    focus_area: Optional[str] = None
    feedback_category: FeedbackCategory = FeedbackCategory.GENERAL
    status: CommentStatus = CommentStatus.OPEN


class CommentEdit(BaseModel):
    """A previous version of an edited comment."""

    timestamp: datetime
    old_values: dict[str, Any] = Field(default_factory=dict)


class DeckComment(NewComment):
    """A stored reviewer comment with classification metadata."""

    id: str = Field(default_factory=new_id)
    deck_id: str
    reviewer_session_id: Optional[str] = None
    ai_sentiment_score: Optional[float] = Field(default=None, ge=-1, le=1)
    ai_expertise_score: Optional[float] = Field(default=None, ge=0, le=1)
    ai_improvement_category: Optional[str] = None
    feedback_weight: float = Field(default=1.0, ge=0)
    is_edited: bool = False
    edit_history: list[CommentEdit] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class ReviewerSession(BaseModel):
    """An anonymous or authenticated reviewer scoped to a share token."""

    id: str = Field(default_factory=new_id)
    share_token: str
    session_id: str = Field(..., description="Client-side session key, unique")
    declared_role: Optional[str] = None
    reviewer_name: Optional[str] = None
    reviewer_email: Optional[str] = None
    expertise_level: Optional[str] = None
    user_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    last_activity_at: datetime = Field(default_factory=utc_now)


class SmartShareLink(BaseModel):
    """A deck-scoped share token with optional role weighting."""

    id: str = Field(default_factory=new_id)
    deck_id: str
    share_token: str = Field(default_factory=new_id)
    share_type: ShareType = ShareType.FEEDBACK
    custom_weights: dict[str, float] = Field(default_factory=dict, description="role -> multiplier")
    target_roles: list[str] = Field(default_factory=list)
    focus_areas: list[str] = Field(default_factory=list)
    ai_analysis_enabled: bool = True
    requires_verification: bool = False
    allow_anonymous_feedback: bool = False
    created_by: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at < (now or utc_now())


class ShareRecipient(BaseModel):
    """A named recipient of a share link who must verify with an access code."""

    id: str = Field(default_factory=new_id)
    share_link_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    feedback_weight: Optional[float] = Field(default=None, ge=0)
    access_code: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)


class FeedbackInsight(BaseModel):
    """Stored analytics snapshot of a deck's comment set."""

    id: str = Field(default_factory=new_id)
    deck_id: str
    share_token: Optional[str] = None
    analysis_type: str = "deck_comment_summary_v1"
    insights: dict[str, Any] = Field(default_factory=dict)
    confidence_score: float = Field(default=0.8, ge=0, le=1)
    generated_at: datetime = Field(default_factory=utc_now)


class AuditLogEntry(BaseModel):
    """Append-only record of a deck content interaction."""

    deck_id: str
    action_type: str
    details: dict[str, Any] = Field(default_factory=dict)
    user_id: Optional[str] = None
    slide_id: Optional[str] = None
    element_id: Optional[str] = None
    session_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
