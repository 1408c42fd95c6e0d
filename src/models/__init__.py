"""Pydantic models and schemas for type-safe data handling."""

from .deck import Deck, Section, VisualComponent, ComponentLayout, COMPONENT_TYPES
from .feedback import (
    DeckComment,
    NewComment,
    CommentStatus,
    FeedbackCategory,
    ReviewerSession,
    SmartShareLink,
    ShareRecipient,
    ShareType,
    FeedbackInsight,
    AuditLogEntry,
)
from .proposal import (
    ChangeType,
    ProposalStatus,
    DeckAiUpdateProposal,
    ProposedContent,
    TextEditData,
    ImageSwapData,
    ChartUpdateData,
    NewElementData,
    DeleteElementData,
    ReorderElementData,
    NewSlideData,
    ReorderSlideData,
    parse_proposed_content,
)

__all__ = [
    # Deck models
    "Deck",
    "Section",
    "VisualComponent",
    "ComponentLayout",
    "COMPONENT_TYPES",
    # Feedback models
    "DeckComment",
    "NewComment",
    "CommentStatus",
    "FeedbackCategory",
    "ReviewerSession",
    "SmartShareLink",
    "ShareRecipient",
    "ShareType",
    "FeedbackInsight",
    "AuditLogEntry",
    # Proposal models
    "ChangeType",
    "ProposalStatus",
    "DeckAiUpdateProposal",
    "ProposedContent",
    "TextEditData",
    "ImageSwapData",
    "ChartUpdateData",
    "NewElementData",
    "DeleteElementData",
    "ReorderElementData",
    "NewSlideData",
    "ReorderSlideData",
    "parse_proposed_content",
]
