"""
Unit tests for pending proposal deduplication.
"""
from src.models import (
    ChangeType,
    ChartUpdateData,
    DeckAiUpdateProposal,
    TextEditData,
)
from src.services.proposals.dedup import canonical_payload, is_duplicate


def _chart_proposal(new_data, element_id="chart-1"):
    return DeckAiUpdateProposal(
        deck_id="deck-1",
        slide_id="slide-2",
        element_id=element_id,
        change_type=ChangeType.CHART_UPDATE,
        proposed_content_data=ChartUpdateData(new_data=new_data),
    )


class TestIsDuplicate:
    """Tests for is_duplicate."""

    def test_key_order_does_not_matter(self):
        existing = _chart_proposal({"a": 1, "b": 2})
        candidate = _chart_proposal({"b": 2, "a": 1})

        assert canonical_payload(existing) == canonical_payload(candidate)
        assert is_duplicate(candidate, [existing])

    def test_different_element_is_not_duplicate(self):
        existing = _chart_proposal({"a": 1})
        candidate = _chart_proposal({"a": 1}, element_id="chart-2")

        assert not is_duplicate(candidate, [existing])

    def test_different_change_type_is_not_duplicate(self):
        existing = _chart_proposal({"a": 1})
        candidate = DeckAiUpdateProposal(
            deck_id="deck-1",
            slide_id="slide-2",
            element_id="chart-1",
            change_type=ChangeType.TEXT_EDIT,
            proposed_content_data=TextEditData(note="{'a': 1}"),
        )

        assert not is_duplicate(candidate, [existing])

    def test_empty_pending_set(self):
        assert not is_duplicate(_chart_proposal({"a": 1}), [])
