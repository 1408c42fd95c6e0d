"""Owner moderation of AI proposals."""
import logging
from typing import Optional

from src.core import InvalidTransitionError, ProposalNotFoundError, ProposalPersistenceError
from src.models import DeckAiUpdateProposal, ProposalStatus
from src.models.deck import utc_now

from ..audit import AuditAction, AuditLogger
from ..storage import DeckReviewRepository
from .applier import PatchApplier

logger = logging.getLogger(__name__)

_STATUS_ACTIONS = {
    ProposalStatus.ACCEPTED: AuditAction.AI_PROPOSAL_ACCEPTED,
    ProposalStatus.REJECTED: AuditAction.AI_PROPOSAL_REJECTED,
    ProposalStatus.MODIFIED: AuditAction.AI_PROPOSAL_MODIFIED,
    ProposalStatus.ARCHIVED: AuditAction.AI_PROPOSAL_ARCHIVED,
}


class ProposalWorkflow:
    """
    Pending -> Accepted | Rejected | Modified | Archived.

    Every non-Pending state is terminal. Accepting a proposal applies it to
    the deck.
    """

    def __init__(
        self,
        repository: DeckReviewRepository,
        applier: PatchApplier,
        audit: AuditLogger,
    ):
        self._repository = repository
        self._applier = applier
        self._audit = audit

    def get_proposal(self, proposal_id: str) -> DeckAiUpdateProposal:
        record = self._repository.get_proposal(proposal_id)
        if record is None:
            raise ProposalNotFoundError(proposal_id)
        return DeckAiUpdateProposal.from_record(record)

    def list_proposals(
        self,
        deck_id: str,
        slide_id: Optional[str] = None,
        status: Optional[ProposalStatus] = None,
    ) -> list[DeckAiUpdateProposal]:
        """Proposals for a deck, newest first."""
        records = self._repository.list_proposals(
            deck_id, slide_id, status.value if status else None
        )
        return [DeckAiUpdateProposal.from_record(r) for r in records]

    def update_status(
        self,
        proposal_id: str,
        status: ProposalStatus,
        notes: Optional[str] = None,
    ) -> DeckAiUpdateProposal:
        """
        Move a pending proposal to a terminal status.

        Raises:
            ProposalNotFoundError: if the proposal does not exist
            InvalidTransitionError: if the proposal is not Pending, or the
                requested status is Pending
            ProposalPersistenceError: if the status could not be written
            ProposalApplyError: if an accepted proposal could not be applied;
                the proposal stays Accepted
        """
        status = ProposalStatus(status)
        current = self.get_proposal(proposal_id)
        if current.status.is_terminal or not status.is_terminal:
            raise InvalidTransitionError(proposal_id, current.status.value, status.value)

        updates = {"status": status.value, "updated_at": utc_now().isoformat()}
        if notes is not None:
            updates["owner_action_notes"] = notes

        try:
            record = self._repository.update_proposal(
                proposal_id, updates, expected_status=ProposalStatus.PENDING.value
            )
        except InvalidTransitionError:
            logger.warning(f"Proposal {proposal_id} left Pending before its status update")
            raise
        except Exception as e:
            logger.error(f"Error updating proposal {proposal_id} status: {e}")
            self._audit.log(
                current.deck_id,
                AuditAction.AI_PROPOSAL_STATUS_UPDATE_FAILED,
                {"proposalId": proposal_id, "newStatus": status.value, "error": str(e)},
                slide_id=current.slide_id,
                element_id=current.element_id,
            )
            raise ProposalPersistenceError(f"Failed to update proposal {proposal_id}: {e}") from e

        if record is None:
            raise ProposalNotFoundError(proposal_id)

        updated = DeckAiUpdateProposal.from_record(record)
        self._audit.log(
            updated.deck_id,
            _STATUS_ACTIONS[status],
            {"proposalId": proposal_id, "notes": notes},
            slide_id=updated.slide_id,
            element_id=updated.element_id,
        )

        if status is ProposalStatus.ACCEPTED:
            self._applier.apply(updated)
        return updated
