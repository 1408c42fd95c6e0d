"""
Unit tests for proposal moderation.
"""
from datetime import timedelta

import pytest
from unittest.mock import patch

from src.core import (
    InvalidTransitionError,
    ProposalApplyError,
    ProposalNotFoundError,
    ProposalPersistenceError,
)
from src.models import (
    ChangeType,
    DeckAiUpdateProposal,
    NewElementData,
    ProposalStatus,
    TextEditData,
)
from src.services.audit import AuditAction
from src.services.proposals import PatchApplier, ProposalWorkflow


@pytest.fixture
def workflow(repository, audit):
    return ProposalWorkflow(repository, PatchApplier(repository, audit), audit)


@pytest.fixture
def stored_proposal(repository, sample_deck):
    proposal = DeckAiUpdateProposal(
        deck_id="deck-1",
        slide_id="slide-1",
        change_type=ChangeType.NEW_ELEMENT,
        proposed_content_data=NewElementData(component_type="quote", data={"text": "Great team"}),
    )
    repository.insert_proposal(proposal.to_record())
    return proposal


class TestUpdateStatus:
    """Tests for ProposalWorkflow.update_status."""

    def test_accept_applies_proposal(self, workflow, repository, stored_proposal):
        updated = workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED, notes="ship it")

        assert updated.status == ProposalStatus.ACCEPTED
        assert updated.owner_action_notes == "ship it"
        assert len(repository.get_deck("deck-1").find_section("slide-1").components) == 3
        actions = repository.audit_actions("deck-1")
        assert actions.index(AuditAction.AI_PROPOSAL_ACCEPTED) < actions.index(AuditAction.AI_PROPOSAL_APPLIED)

    @pytest.mark.parametrize("status,action", [
        (ProposalStatus.REJECTED, AuditAction.AI_PROPOSAL_REJECTED),
        (ProposalStatus.MODIFIED, AuditAction.AI_PROPOSAL_MODIFIED),
        (ProposalStatus.ARCHIVED, AuditAction.AI_PROPOSAL_ARCHIVED),
    ])
    def test_other_decisions_do_not_touch_deck(
        self, workflow, repository, sample_deck, stored_proposal, status, action
    ):
        updated = workflow.update_status(stored_proposal.id, status)

        assert updated.status == status
        assert repository.get_deck("deck-1").version == sample_deck.version
        assert action in repository.audit_actions("deck-1")

    def test_reaccept_rejected_and_deck_mutated_once(self, workflow, repository, stored_proposal):
        workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED)
        version_after_first = repository.get_deck("deck-1").version

        with pytest.raises(InvalidTransitionError):
            workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED)

        deck = repository.get_deck("deck-1")
        assert deck.version == version_after_first
        assert len(deck.find_section("slide-1").components) == 3

    def test_terminal_state_has_no_outgoing_transitions(self, workflow, stored_proposal):
        workflow.update_status(stored_proposal.id, ProposalStatus.REJECTED)

        with pytest.raises(InvalidTransitionError):
            workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED)

    def test_pending_to_pending_rejected(self, workflow, stored_proposal):
        with pytest.raises(InvalidTransitionError):
            workflow.update_status(stored_proposal.id, ProposalStatus.PENDING)

    def test_missing_proposal(self, workflow):
        with pytest.raises(ProposalNotFoundError):
            workflow.update_status("nope", ProposalStatus.ACCEPTED)

    def test_status_write_failure(self, workflow, repository, stored_proposal):
        with patch.object(repository, "update_proposal", side_effect=RuntimeError("db down")):
            with pytest.raises(ProposalPersistenceError):
                workflow.update_status(stored_proposal.id, ProposalStatus.REJECTED)

        assert AuditAction.AI_PROPOSAL_STATUS_UPDATE_FAILED in repository.audit_actions("deck-1")

    def test_status_write_refused_once_no_longer_pending(self, workflow, repository, stored_proposal):
        pending_record = stored_proposal.to_record()
        repository.update_proposal(stored_proposal.id, {"status": ProposalStatus.REJECTED.value})

        with patch.object(repository, "get_proposal", return_value=pending_record):
            with pytest.raises(InvalidTransitionError):
                workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED)

        assert repository.get_proposal(stored_proposal.id)["status"] == ProposalStatus.REJECTED.value
        assert len(repository.get_deck("deck-1").find_section("slide-1").components) == 2
        assert AuditAction.AI_PROPOSAL_STATUS_UPDATE_FAILED not in repository.audit_actions("deck-1")

    def test_audit_failure_does_not_fail_accept(self, workflow, repository, audit, stored_proposal):
        with patch.object(repository, "append_audit_log", side_effect=RuntimeError("audit down")):
            updated = workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED)

        assert updated.status == ProposalStatus.ACCEPTED
        assert len(repository.get_deck("deck-1").find_section("slide-1").components) == 3
        assert audit.failed_count == 2

    def test_apply_failure_leaves_proposal_accepted(self, workflow, repository, stored_proposal):
        with patch.object(repository, "save_deck", side_effect=RuntimeError("disk full")):
            with pytest.raises(ProposalApplyError):
                workflow.update_status(stored_proposal.id, ProposalStatus.ACCEPTED)

        assert workflow.get_proposal(stored_proposal.id).status == ProposalStatus.ACCEPTED

    def test_accepting_equal_text_is_no_op(self, workflow, repository, sample_deck):
        proposal = DeckAiUpdateProposal(
            deck_id="deck-1",
            slide_id="slide-1",
            element_id="text-1",
            change_type=ChangeType.TEXT_EDIT,
            proposed_content_data=TextEditData(new_text_content="Old headline"),
        )
        repository.insert_proposal(proposal.to_record())

        workflow.update_status(proposal.id, ProposalStatus.ACCEPTED)

        assert repository.get_deck("deck-1").version == sample_deck.version
        assert AuditAction.AI_PROPOSAL_ACCEPTED_NO_OP in repository.audit_actions("deck-1")


class TestListProposals:
    """Tests for ProposalWorkflow.list_proposals."""

    def test_filters_by_status(self, workflow, repository, stored_proposal):
        other = stored_proposal.model_copy(update={"id": "other"})
        repository.insert_proposal(other.to_record())
        workflow.update_status("other", ProposalStatus.REJECTED)

        pending = workflow.list_proposals("deck-1", status=ProposalStatus.PENDING)

        assert [p.id for p in pending] == [stored_proposal.id]
        assert len(workflow.list_proposals("deck-1")) == 2

    def test_newest_first(self, workflow, repository, stored_proposal):
        newer = stored_proposal.model_copy(
            update={"id": "newer", "created_at": stored_proposal.created_at + timedelta(seconds=5)}
        )
        repository.insert_proposal(newer.to_record())

        assert [p.id for p in workflow.list_proposals("deck-1")] == ["newer", stored_proposal.id]
