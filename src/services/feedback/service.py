"""Comment store: classification, weighting, edit history and insights."""
import logging
import secrets
import time
from typing import Callable, Optional

from src.core import CommentNotFoundError, CommentPersistenceError, get_settings
from src.models import (
    CommentStatus,
    DeckComment,
    FeedbackCategory,
    FeedbackInsight,
    NewComment,
)
from src.models.deck import utc_now
from src.models.feedback import CommentEdit

from ..ai_feedback import FeedbackAIService
from ..audit import AuditAction, AuditLogger
from ..storage import DeckReviewRepository
from .insights import CommentInsights, aggregate_comment_insights
from .sharing import SharingService
from .weighting import resolve_feedback_weight

logger = logging.getLogger(__name__)

CommentsCallback = Callable[[list[DeckComment]], None]


class FeedbackService:
    """Reviewer comments and the analytics derived from them."""

    def __init__(
        self,
        repository: DeckReviewRepository,
        ai_service: FeedbackAIService,
        audit: AuditLogger,
        sharing: SharingService,
    ):
        self._settings = get_settings()
        self._repository = repository
        self._ai = ai_service
        self._audit = audit
        self._sharing = sharing

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    async def add_comment(
        self,
        deck_id: str,
        new_comment: NewComment,
        share_token: Optional[str] = None,
        reviewer_session_id: Optional[str] = None,
    ) -> DeckComment:
        """
        Store a reviewer comment with AI classification and feedback weight.

        Classification is best-effort. The weight comes from the share link
        behind the reviewer session and is fixed at creation time.

        Raises:
            CommentPersistenceError: if the comment could not be stored
        """
        classification = None
        if self._settings.comment_classification_enabled and self._ai.is_available:
            classification = await self._ai.classify_comment(new_comment.text_content)

        if share_token and not reviewer_session_id:
            session = self._sharing.create_or_update_reviewer_session(
                share_token,
                f"session_{int(time.time() * 1000)}_{secrets.token_hex(6)}",
                reviewer_name=new_comment.author_display_name,
                declared_role=new_comment.declared_role,
                user_id=new_comment.author_user_id,
            )
            reviewer_session_id = session.id

        comment = DeckComment(
            deck_id=deck_id,
            reviewer_session_id=reviewer_session_id,
            feedback_weight=self._resolve_weight(new_comment.declared_role, reviewer_session_id),
            **new_comment.model_dump(),
        )
        if classification is not None:
            comment.ai_sentiment_score = classification.sentiment_score
            comment.ai_expertise_score = classification.expertise_score
            comment.ai_improvement_category = classification.improvement_category

        try:
            stored = self._repository.insert_comment(comment)
        except Exception as e:
            logger.error(f"Error adding comment: {e}")
            self._audit.log(
                deck_id,
                AuditAction.COMMENT_ADD_FAILED,
                {"slideId": comment.slide_id, "error": str(e)},
                user_id=comment.author_user_id,
                slide_id=comment.slide_id,
                session_id=reviewer_session_id,
            )
            raise CommentPersistenceError("Failed to add comment") from e

        self._audit.log(
            deck_id,
            AuditAction.COMMENT_ADD,
            {
                "commentId": stored.id,
                "slideId": stored.slide_id,
                "viaShareToken": bool(share_token),
                "reviewerSessionId": reviewer_session_id,
            },
            user_id=stored.author_user_id,
            slide_id=stored.slide_id,
            element_id=stored.element_id,
            session_id=reviewer_session_id,
        )
        return stored

    def _resolve_weight(self, declared_role: Optional[str], reviewer_session_id: Optional[str]) -> float:
        default = self._settings.default_feedback_weight
        if not reviewer_session_id:
            return default

        session = self._repository.get_reviewer_session(reviewer_session_id)
        if session is None:
            logger.warning(f"Reviewer session {reviewer_session_id} not found, using default weight")
            return default

        link = self._repository.get_share_link(session.share_token)
        if link is None:
            return default

        return resolve_feedback_weight(
            declared_role or session.declared_role, link.custom_weights, default=default
        )

    def update_comment(
        self,
        comment_id: str,
        *,
        text_content: Optional[str] = None,
        feedback_category: Optional[FeedbackCategory] = None,
        status: Optional[CommentStatus] = None,
    ) -> DeckComment:
        """
        Apply changes to a comment; text changes are kept in its edit history.

        Raises:
            CommentNotFoundError: if the comment does not exist
        """
        existing = self._repository.get_comment(comment_id)
        if existing is None:
            raise CommentNotFoundError(comment_id)

        updates = {}
        if text_content is not None and text_content != existing.text_content:
            updates["text_content"] = text_content
            updates["is_edited"] = True
            updates["edit_history"] = [
                *existing.edit_history,
                CommentEdit(
                    timestamp=existing.updated_at,
                    old_values={"text_content": existing.text_content},
                ),
            ]
        if feedback_category is not None and feedback_category != existing.feedback_category:
            updates["feedback_category"] = feedback_category
        if status is not None and status != existing.status:
            updates["status"] = status

        if not updates:
            return existing

        updated = existing.model_copy(update={**updates, "updated_at": utc_now()})
        stored = self._repository.update_comment(updated)
        self._audit.log(
            stored.deck_id,
            AuditAction.COMMENT_UPDATE,
            {"commentId": comment_id, "fields": sorted(updates)},
            user_id=stored.author_user_id,
            slide_id=stored.slide_id,
        )
        return stored

    def delete_comment(self, comment_id: str, user_id: Optional[str] = None) -> None:
        existing = self._repository.get_comment(comment_id)
        if existing is None:
            raise CommentNotFoundError(comment_id)

        self._repository.delete_comment(comment_id)
        self._audit.log(
            existing.deck_id, AuditAction.COMMENT_DELETE, {"commentId": comment_id}, user_id=user_id
        )

    def get_comments(self, deck_id: str, slide_id: Optional[str] = None) -> list[DeckComment]:
        return self._repository.list_comments(deck_id, slide_id)

    def get_feedback_by_category(self, deck_id: str) -> dict[FeedbackCategory, list[DeckComment]]:
        """Split a deck's comments into Content, Form and General feedback."""
        grouped: dict[FeedbackCategory, list[DeckComment]] = {c: [] for c in FeedbackCategory}
        for comment in self.get_comments(deck_id):
            grouped[comment.feedback_category].append(comment)
        return grouped

    def subscribe_to_comments(self, deck_id: str, callback: CommentsCallback) -> Callable[[], None]:
        """
        Push the full comment list to ``callback`` whenever a deck's comments change.

        Returns:
            A callable that cancels the subscription
        """
        def on_change(event: str, comment_id: str) -> None:
            logger.debug(f"Comment change {event} for {comment_id} on deck {deck_id}")
            callback(self.get_comments(deck_id))

        return self._repository.subscribe_comments(deck_id, on_change)

    # -------------------------------------------------------------------------
    # Insights
    # -------------------------------------------------------------------------

    def summarize(self, comments: list[DeckComment]) -> CommentInsights:
        """Aggregate a comment set using the configured thresholds."""
        return aggregate_comment_insights(
            comments,
            positive_threshold=self._settings.positive_sentiment_threshold,
            negative_threshold=self._settings.negative_sentiment_threshold,
            high_expertise_threshold=self._settings.high_expertise_threshold,
            low_expertise_threshold=self._settings.low_expertise_threshold,
            top_categories=self._settings.insight_top_categories,
        )

    def generate_and_store_insights(
        self,
        deck_id: str,
        share_token: Optional[str] = None,
    ) -> Optional[FeedbackInsight]:
        """
        Aggregate all of a deck's comments and store the snapshot.

        Returns:
            The stored insight, or None when the deck has no comments or the
            snapshot could not be stored
        """
        comments = self.get_comments(deck_id)
        if not comments:
            logger.info(f"No comments found for deck {deck_id} to generate aggregated insights.")
            return None

        insights = self.summarize(comments)
        try:
            stored = self._repository.insert_insight(
                FeedbackInsight(
                    deck_id=deck_id,
                    share_token=share_token,
                    insights=insights.to_snapshot(),
                )
            )
        except Exception as e:
            logger.error(f"Error storing aggregated AI feedback insights: {e}")
            self._audit.log(
                deck_id,
                AuditAction.AI_AGGREGATED_INSIGHTS_FAILED,
                {"error": str(e)},
                session_id=share_token,
            )
            return None

        self._audit.log(
            deck_id,
            AuditAction.AI_AGGREGATED_INSIGHTS_GENERATED,
            {
                "insightId": stored.id,
                "analysisType": stored.analysis_type,
                "commentCount": insights.total_comments,
            },
            session_id=share_token,
        )
        return stored
