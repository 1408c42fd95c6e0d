"""
Feedback Service
Stores reviewer comments, weights them by role and aggregates insights.
"""

from .service import FeedbackService
from .sharing import SharingService, VerificationResult
from .insights import CommentInsights, aggregate_comment_insights
from .weighting import resolve_feedback_weight, mean_feedback_weight

__all__ = [
    "FeedbackService",
    "SharingService",
    "VerificationResult",
    "CommentInsights",
    "aggregate_comment_insights",
    "resolve_feedback_weight",
    "mean_feedback_weight",
]
