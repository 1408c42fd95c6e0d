"""
Deck Review Service

Facade over the feedback store, proposal pipeline and sharing. Wires the
collaborators together from settings for the API layer.
"""
import logging
from typing import Optional

from dotenv import load_dotenv

from src.core import DeckNotFoundError, SlideNotFoundError, get_settings
from src.models import CommentStatus, Deck, DeckAiUpdateProposal, ProposalStatus

from ..ai_feedback import FeedbackAIService, get_feedback_ai_service
from ..audit import AuditAction, AuditLogger
from ..feedback import FeedbackService, SharingService
from ..proposals import PatchApplier, ProposalGenerator, ProposalWorkflow
from ..storage import DeckReviewRepository, get_repository

load_dotenv()

logger = logging.getLogger(__name__)


class DeckReviewService:
    """Entry point for deck, feedback and proposal operations."""

    def __init__(
        self,
        repository: Optional[DeckReviewRepository] = None,
        ai_service: Optional[FeedbackAIService] = None,
    ):
        self._settings = get_settings()
        self.repository = repository or get_repository()
        self.ai_service = ai_service or get_feedback_ai_service()
        self.audit = AuditLogger(self.repository)

        self.sharing = SharingService(self.repository, self.audit)
        self.feedback = FeedbackService(self.repository, self.ai_service, self.audit, self.sharing)
        self.generator = ProposalGenerator(self.repository, self.ai_service, self.audit)
        self.applier = PatchApplier(self.repository, self.audit)
        self.proposals = ProposalWorkflow(self.repository, self.applier, self.audit)

    @property
    def is_ai_available(self) -> bool:
        return self.ai_service.is_available

    # -------------------------------------------------------------------------
    # Decks
    # -------------------------------------------------------------------------

    def get_deck(self, deck_id: str) -> Deck:
        deck = self.repository.get_deck(deck_id)
        if deck is None:
            raise DeckNotFoundError(deck_id)
        return deck

    def save_deck(self, deck: Deck, expected_version: Optional[int] = None) -> Deck:
        """
        Persist a whole deck.

        Raises:
            ConcurrentModificationError: if ``expected_version`` is stale
        """
        try:
            saved = self.repository.save_deck(deck, expected_version=expected_version)
        except Exception as e:
            logger.error(f"Error saving deck {deck.id}: {e}")
            self.audit.log(
                deck.id, AuditAction.DECK_SAVE_FAILED, {"error": str(e)}, user_id=deck.user_id
            )
            raise

        self.audit.log(
            saved.id,
            AuditAction.DECK_SAVE,
            {"version": saved.version, "sectionCount": len(saved.sections)},
            user_id=saved.user_id,
        )
        return saved

    # -------------------------------------------------------------------------
    # Proposals
    # -------------------------------------------------------------------------

    async def generate_proposals(
        self,
        deck_id: str,
        slide_id: str,
        comment_ids: Optional[list[str]] = None,
    ) -> list[DeckAiUpdateProposal]:
        """
        Generate proposals for a slide from its open comments.

        Args:
            deck_id: Deck id
            slide_id: Slide to improve
            comment_ids: Restrict the pass to these comments

        Raises:
            DeckNotFoundError: if the deck does not exist
            SlideNotFoundError: if the slide is not in the deck
        """
        deck = self.get_deck(deck_id)
        section = deck.find_section(slide_id)
        if section is None:
            raise SlideNotFoundError(deck_id, slide_id)

        comments = [
            c for c in self.feedback.get_comments(deck_id, slide_id)
            if c.status == CommentStatus.OPEN
            and (comment_ids is None or c.id in comment_ids)
        ]
        return await self.generator.generate(deck_id, slide_id, section, comments)

    def update_proposal_status(
        self,
        proposal_id: str,
        status: ProposalStatus,
        notes: Optional[str] = None,
    ) -> DeckAiUpdateProposal:
        return self.proposals.update_status(proposal_id, status, notes)

    def list_proposals(
        self,
        deck_id: str,
        slide_id: Optional[str] = None,
        status: Optional[ProposalStatus] = None,
    ) -> list[DeckAiUpdateProposal]:
        return self.proposals.list_proposals(deck_id, slide_id, status)


# Singleton instance
_deck_review_service: Optional[DeckReviewService] = None


def get_deck_review_service() -> DeckReviewService:
    """Get the singleton Deck Review service instance."""
    global _deck_review_service
    if _deck_review_service is None:
        _deck_review_service = DeckReviewService()
    return _deck_review_service
