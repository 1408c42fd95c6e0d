"""Duplicate detection for pending proposals."""
import json
from typing import Iterable

from src.models import DeckAiUpdateProposal


def canonical_payload(proposal: DeckAiUpdateProposal) -> str:
    """Stable JSON form of a proposal payload; key order never matters."""
    return json.dumps(proposal.payload_dict(), sort_keys=True, separators=(",", ":"), default=str)


def is_duplicate(candidate: DeckAiUpdateProposal, pending: Iterable[DeckAiUpdateProposal]) -> bool:
    """True if a pending proposal has the same change type, target and payload."""
    key = canonical_payload(candidate)
    return any(
        existing.change_type == candidate.change_type
        and existing.element_id == candidate.element_id
        and canonical_payload(existing) == key
        for existing in pending
    )
