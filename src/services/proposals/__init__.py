"""
Proposal Services
Generation, deduplication, moderation and application of AI change proposals.
"""

from .applier import ApplyOutcome, PatchApplier
from .dedup import canonical_payload, is_duplicate
from .generator import ProposalGenerator, UnmappableSuggestion, map_suggestion
from .workflow import ProposalWorkflow

__all__ = [
    "ApplyOutcome",
    "PatchApplier",
    "canonical_payload",
    "is_duplicate",
    "ProposalGenerator",
    "UnmappableSuggestion",
    "map_suggestion",
    "ProposalWorkflow",
]
