"""
Proposal Generator

Turns a slide's reviewer comments into typed, deduplicated change proposals
using the feedback AI service's rewrite suggestions.
"""
import copy
import logging
from typing import Optional

from pydantic import ValidationError

from src.core import ProposalPersistenceError, get_settings
from src.models import (
    COMPONENT_TYPES,
    ChangeType,
    ChartUpdateData,
    DeckAiUpdateProposal,
    DeckComment,
    DeleteElementData,
    ImageSwapData,
    NewElementData,
    NewSlideData,
    ProposalStatus,
    ReorderElementData,
    ReorderSlideData,
    Section,
    TextEditData,
)
from src.models.deck import new_id
from src.models.proposal import ProposedContent

from ..ai_feedback import AiGeneratedSuggestion, FeedbackAIService, SuggestionRequest
from ..ai_feedback.models import SlideContentInput, SlideElementInput, SuggestionCommentInput
from ..audit import AuditAction, AuditLogger
from ..feedback.insights import aggregate_comment_insights
from ..feedback.weighting import mean_feedback_weight
from ..storage import DeckReviewRepository
from .dedup import is_duplicate

logger = logging.getLogger(__name__)


class UnmappableSuggestion(ValueError):
    """A suggestion lacks the detail its category needs."""


def map_suggestion(
    suggestion: AiGeneratedSuggestion,
    section: Section,
) -> Optional[tuple[Optional[str], ProposedContent]]:
    """
    Translate a suggestion into a target element id and typed payload.

    Returns:
        ``(element_id, payload)``, or None for advice-only suggestions

    Raises:
        UnmappableSuggestion: when required details are missing
    """
    element_id = suggestion.target_element_id
    details = suggestion.restructure_details or {}

    match suggestion.proposal_category:
        case "ContentEdit":
            content = suggestion.suggested_content
            if content and content.new_text:
                return element_id, TextEditData(new_text_content=content.new_text)
            if content and content.new_image_url:
                return element_id, ImageSwapData(
                    new_image_url=content.new_image_url,
                    new_alt_text=content.new_alt_text,
                )
            if content and content.new_chart_data is not None:
                return element_id, ChartUpdateData(
                    new_data=content.new_chart_data,
                    new_chart_options=content.new_chart_options,
                )
            return element_id, TextEditData(note=suggestion.description)

        case "NewSlideElement":
            element = suggestion.new_element_data
            if element is None:
                raise UnmappableSuggestion("NewSlideElement without element data")
            if element.component_type not in COMPONENT_TYPES:
                raise UnmappableSuggestion(f"Unknown component type {element.component_type}")
            return element_id, NewElementData(
                component_type=element.component_type,
                data=element.data,
                layout=element.layout,
            )

        case "SlideRestructure":
            operation = suggestion.restructure_operation
            if operation == "DeleteElement" and element_id:
                return element_id, DeleteElementData()
            if operation == "ReorderElement" and element_id and details.get("newOrder") is not None:
                return element_id, ReorderElementData(new_order=details["newOrder"])
            if operation == "AddNewSlideAfter" and details.get("newSlideData"):
                slide_data = details["newSlideData"]
                if not isinstance(slide_data, dict):
                    raise UnmappableSuggestion("AddNewSlideAfter with non-object slide data")
                try:
                    Section.model_validate({**slide_data, "id": new_id(), "order": 0})
                except ValidationError as e:
                    raise UnmappableSuggestion(f"Invalid new slide data: {e}") from e
                target_order = details.get("targetOrder")
                return None, NewSlideData(
                    new_slide_data=slide_data,
                    target_order=section.order + 1 if target_order is None else target_order,
                )
            if operation == "ReorderSlide" and details.get("newOrder") is not None:
                return None, ReorderSlideData(new_order=details["newOrder"])
            raise UnmappableSuggestion(f"Incomplete restructure suggestion ({operation})")

        case "GeneralAdvice":
            return None

    raise UnmappableSuggestion(f"Unknown proposal category {suggestion.proposal_category}")


class ProposalGenerator:
    """Builds pending proposals for one slide from its comments."""

    def __init__(
        self,
        repository: DeckReviewRepository,
        ai_service: FeedbackAIService,
        audit: AuditLogger,
    ):
        self._settings = get_settings()
        self._repository = repository
        self._ai = ai_service
        self._audit = audit

    def build_request(
        self,
        deck_id: str,
        slide_id: str,
        section: Section,
        comments: list[DeckComment],
    ) -> SuggestionRequest:
        insights = aggregate_comment_insights(
            comments,
            positive_threshold=self._settings.positive_sentiment_threshold,
            negative_threshold=self._settings.negative_sentiment_threshold,
            high_expertise_threshold=self._settings.high_expertise_threshold,
            low_expertise_threshold=self._settings.low_expertise_threshold,
            top_categories=self._settings.insight_top_categories,
        )
        return SuggestionRequest(
            deck_id=deck_id,
            slide_id=slide_id,
            comments=[
                SuggestionCommentInput(
                    id=c.id,
                    text_content=c.text_content,
                    author_display_name=c.author_display_name,
                    comment_type=c.comment_type,
                    declared_role=c.declared_role,
                )
                for c in comments
            ],
            slide_content=SlideContentInput(
                title=section.title,
                elements=[
                    SlideElementInput(id=comp.id, type=comp.type, data=comp.data)
                    for comp in section.components
                ],
            ),
            aggregated_insights_summary=insights.to_digest(self._settings.digest_top_categories),
        )

    def pending_proposals(self, deck_id: str, slide_id: str) -> list[DeckAiUpdateProposal]:
        records = self._repository.list_proposals(deck_id, slide_id, ProposalStatus.PENDING.value)
        return [DeckAiUpdateProposal.from_record(r) for r in records]

    async def generate(
        self,
        deck_id: str,
        slide_id: str,
        section: Section,
        comments: list[DeckComment],
    ) -> list[DeckAiUpdateProposal]:
        """
        Generate and store proposals for a slide.

        Args:
            deck_id: Deck the slide belongs to
            slide_id: Slide the comments were left on
            section: Current content of that slide
            comments: Source comments for this pass

        Returns:
            Newly stored proposals in suggestion order

        Raises:
            ProposalPersistenceError: if a proposal could not be stored
        """
        if not self._settings.proposal_generation_enabled or not self._ai.is_available:
            logger.info("Proposal generation skipped: AI service unavailable")
            return []
        if not comments:
            logger.info(f"No comments for slide {slide_id}, nothing to generate")
            return []

        request = self.build_request(deck_id, slide_id, section, comments)
        suggestions = await self._ai.generate_slide_rewrite_suggestions(request)
        if not suggestions:
            logger.info("AI service returned no suggestions.")
            return []

        pending = self.pending_proposals(deck_id, slide_id)
        weighted_score = mean_feedback_weight(
            [c.feedback_weight for c in comments],
            default=self._settings.default_feedback_weight,
        )
        source_ids = [c.id for c in comments]
        created: list[DeckAiUpdateProposal] = []

        for suggestion in suggestions:
            try:
                mapped = map_suggestion(suggestion, section)
            except (UnmappableSuggestion, ValidationError) as e:
                logger.warning(f"Skipping suggestion '{suggestion.description}': {e}")
                continue

            if mapped is None:
                logger.info(f"General AI advice for slide {slide_id}: {suggestion.description}")
                continue

            element_id, payload = mapped
            snapshot = None
            if element_id and suggestion.proposal_category == "ContentEdit":
                target = section.find_component(element_id)
                if target is not None:
                    snapshot = copy.deepcopy(target.data)

            proposal = DeckAiUpdateProposal(
                deck_id=deck_id,
                slide_id=slide_id,
                element_id=element_id,
                change_type=ChangeType(payload.kind),
                description=suggestion.description,
                original_content_snapshot=snapshot,
                proposed_content_data=payload,
                source_comment_ids=source_ids,
                ai_confidence_score=suggestion.confidence_score,
                weighted_feedback_score=weighted_score,
            )

            if is_duplicate(proposal, pending):
                logger.info(f"Skipping duplicate AI proposal: {suggestion.description} for slide {slide_id}")
                continue

            stored = self._insert(proposal)
            pending.append(stored)
            created.append(stored)

        logger.info(f"Generated {len(created)} proposals for slide {slide_id}")
        return created

    def _insert(self, proposal: DeckAiUpdateProposal) -> DeckAiUpdateProposal:
        try:
            record = self._repository.insert_proposal(proposal.to_record())
        except Exception as e:
            logger.error(f"Error saving AI proposal for suggestion: {proposal.description}: {e}")
            self._audit.log(
                proposal.deck_id,
                AuditAction.AI_PROPOSAL_INSERT_FAILED,
                {"changeType": proposal.change_type.value, "error": str(e)},
                slide_id=proposal.slide_id,
                element_id=proposal.element_id,
            )
            raise ProposalPersistenceError(f"Failed to store proposal: {e}") from e

        stored = DeckAiUpdateProposal.from_record(record)
        self._audit.log(
            stored.deck_id,
            AuditAction.AI_PROPOSAL_GENERATED,
            {
                "proposalId": stored.id,
                "changeType": stored.change_type.value,
                "sourceCommentIds": stored.source_comment_ids,
            },
            slide_id=stored.slide_id,
            element_id=stored.element_id,
        )
        return stored
