"""
Unit tests for the comment store.
"""
import pytest
from unittest.mock import Mock, patch

from src.core import CommentNotFoundError, CommentPersistenceError
from src.models import CommentStatus, FeedbackCategory, NewComment
from src.services.ai_feedback.models import CommentClassification
from src.services.audit import AuditAction
from src.services.feedback import FeedbackService, SharingService


@pytest.fixture
def sharing(repository, audit):
    return SharingService(repository, audit)


@pytest.fixture
def feedback(repository, mock_ai_service, audit, sharing):
    return FeedbackService(repository, mock_ai_service, audit, sharing)


@pytest.fixture
def investor_link(sharing, sample_deck):
    return sharing.create_share_link("deck-1", "owner-1", custom_weights={"investor": 2.0})


def _new(text="The market slide is unconvincing", **kwargs):
    return NewComment(slide_id="slide-1", text_content=text, **kwargs)


class TestAddComment:
    """Tests for FeedbackService.add_comment."""

    @pytest.mark.asyncio
    async def test_classification_stored_on_comment(self, feedback, mock_ai_service):
        mock_ai_service.classify_comment.return_value = CommentClassification(
            sentiment_score=-0.5, expertise_score=0.9, improvement_category="Market Sizing"
        )

        comment = await feedback.add_comment("deck-1", _new())

        assert comment.ai_sentiment_score == -0.5
        assert comment.ai_expertise_score == 0.9
        assert comment.ai_improvement_category == "Market Sizing"
        assert comment.feedback_weight == 1.0

    @pytest.mark.asyncio
    async def test_unavailable_ai_skips_classification(self, feedback, mock_ai_service):
        mock_ai_service.is_available = False

        comment = await feedback.add_comment("deck-1", _new())

        mock_ai_service.classify_comment.assert_not_called()
        assert comment.ai_sentiment_score is None

    @pytest.mark.asyncio
    async def test_investor_weight_via_share_token(self, feedback, repository, investor_link):
        comment = await feedback.add_comment(
            "deck-1", _new(declared_role="investor"), share_token=investor_link.share_token
        )

        assert comment.feedback_weight == 2.0
        session = repository.get_reviewer_session(comment.reviewer_session_id)
        assert session.share_token == investor_link.share_token
        assert session.session_id.startswith("session_")

    @pytest.mark.asyncio
    async def test_session_role_used_when_comment_has_none(self, feedback, sharing, investor_link):
        session = sharing.create_or_update_reviewer_session(
            investor_link.share_token, "client-1", declared_role="investor"
        )

        comment = await feedback.add_comment("deck-1", _new(), reviewer_session_id=session.id)

        assert comment.feedback_weight == 2.0

    @pytest.mark.asyncio
    async def test_unknown_role_gets_default_weight(self, feedback, investor_link):
        comment = await feedback.add_comment(
            "deck-1", _new(declared_role="mentor"), share_token=investor_link.share_token
        )

        assert comment.feedback_weight == 1.0

    @pytest.mark.asyncio
    async def test_insert_failure(self, feedback, repository):
        with patch.object(repository, "insert_comment", side_effect=RuntimeError("db down")):
            with pytest.raises(CommentPersistenceError):
                await feedback.add_comment("deck-1", _new())

        assert AuditAction.COMMENT_ADD_FAILED in repository.audit_actions("deck-1")

    @pytest.mark.asyncio
    async def test_audit_failure_does_not_fail_add(self, feedback, repository, audit):
        with patch.object(repository, "append_audit_log", side_effect=RuntimeError("audit down")):
            comment = await feedback.add_comment("deck-1", _new())

        assert repository.get_comment(comment.id) is not None
        assert audit.failed_count == 1


class TestEditing:
    """Tests for update, delete and queries."""

    @pytest.mark.asyncio
    async def test_text_edit_recorded_in_history(self, feedback):
        comment = await feedback.add_comment("deck-1", _new("First draft"))

        updated = feedback.update_comment(comment.id, text_content="Second draft")

        assert updated.is_edited
        assert updated.text_content == "Second draft"
        assert updated.edit_history[0].old_values == {"text_content": "First draft"}

    @pytest.mark.asyncio
    async def test_status_change_is_not_an_edit(self, feedback):
        comment = await feedback.add_comment("deck-1", _new())

        updated = feedback.update_comment(comment.id, status=CommentStatus.RESOLVED)

        assert updated.status == CommentStatus.RESOLVED
        assert not updated.is_edited

    def test_update_missing_comment(self, feedback):
        with pytest.raises(CommentNotFoundError):
            feedback.update_comment("nope", text_content="x")

    @pytest.mark.asyncio
    async def test_delete(self, feedback, repository):
        comment = await feedback.add_comment("deck-1", _new())

        feedback.delete_comment(comment.id)

        assert feedback.get_comments("deck-1") == []
        assert AuditAction.COMMENT_DELETE in repository.audit_actions("deck-1")

    @pytest.mark.asyncio
    async def test_feedback_by_category(self, feedback):
        await feedback.add_comment("deck-1", _new(feedback_category=FeedbackCategory.FORM))
        await feedback.add_comment("deck-1", _new(feedback_category=FeedbackCategory.CONTENT))

        grouped = feedback.get_feedback_by_category("deck-1")

        assert len(grouped[FeedbackCategory.FORM]) == 1
        assert len(grouped[FeedbackCategory.CONTENT]) == 1
        assert grouped[FeedbackCategory.GENERAL] == []


class TestSubscription:
    """Tests for the comment change feed."""

    @pytest.mark.asyncio
    async def test_callback_receives_full_list_until_unsubscribed(self, feedback):
        callback = Mock()
        unsubscribe = feedback.subscribe_to_comments("deck-1", callback)

        await feedback.add_comment("deck-1", _new("one"))
        await feedback.add_comment("deck-1", _new("two"))
        unsubscribe()
        await feedback.add_comment("deck-1", _new("three"))

        assert callback.call_count == 2
        assert [c.text_content for c in callback.call_args.args[0]] == ["one", "two"]

    @pytest.mark.asyncio
    async def test_failing_callback_does_not_break_insert(self, feedback):
        feedback.subscribe_to_comments("deck-1", Mock(side_effect=RuntimeError("boom")))

        comment = await feedback.add_comment("deck-1", _new())

        assert feedback.get_comments("deck-1")[0].id == comment.id


class TestInsights:
    """Tests for stored insight snapshots."""

    def test_no_comments_returns_none(self, feedback, repository):
        assert feedback.generate_and_store_insights("deck-1") is None
        assert repository.list_insights("deck-1") == []

    @pytest.mark.asyncio
    async def test_snapshot_stored(self, feedback, repository, mock_ai_service):
        mock_ai_service.classify_comment.return_value = CommentClassification(
            sentiment_score=0.5, improvement_category="Clarity"
        )
        await feedback.add_comment("deck-1", _new())

        insight = feedback.generate_and_store_insights("deck-1", share_token="tok")

        assert insight.analysis_type == "deck_comment_summary_v1"
        assert insight.insights["total_comments"] == 1
        assert insight.insights["sentiment_breakdown"]["positive"] == 1
        assert insight.insights["key_themes"] == [{"category": "Clarity", "count": 1}]
        assert len(repository.list_insights("deck-1")) == 1
        assert AuditAction.AI_AGGREGATED_INSIGHTS_GENERATED in repository.audit_actions("deck-1")

    @pytest.mark.asyncio
    async def test_storage_failure_returns_none(self, feedback, repository):
        await feedback.add_comment("deck-1", _new())

        with patch.object(repository, "insert_insight", side_effect=RuntimeError("db down")):
            assert feedback.generate_and_store_insights("deck-1") is None

        assert AuditAction.AI_AGGREGATED_INSIGHTS_FAILED in repository.audit_actions("deck-1")
