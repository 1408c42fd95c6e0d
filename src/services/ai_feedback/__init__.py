"""
Feedback AI Service
Classifies reviewer comments and suggests slide rewrites.
"""

from .service import FeedbackAIService, get_feedback_ai_service
from .models import (
    AiGeneratedSuggestion,
    CommentClassification,
    SuggestionRequest,
)

__all__ = [
    "FeedbackAIService",
    "get_feedback_ai_service",
    "AiGeneratedSuggestion",
    "CommentClassification",
    "SuggestionRequest",
]
