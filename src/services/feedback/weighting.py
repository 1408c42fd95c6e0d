"""Role-based feedback weighting."""
from typing import Mapping, Optional

DEFAULT_FEEDBACK_WEIGHT = 1.0


def resolve_feedback_weight(
    declared_role: Optional[str],
    custom_weights: Optional[Mapping[str, float]],
    default: float = DEFAULT_FEEDBACK_WEIGHT,
) -> float:
    """
    Weight for a comment given the reviewer's declared role.

    Args:
        declared_role: Role the reviewer declared (e.g. "investor")
        custom_weights: Share link's role -> multiplier table
        default: Weight used when no multiplier applies

    Returns:
        The role multiplier, or ``default`` when there is no share link
        context, no role, or the role is not in the table. Never negative.
    """
    if not declared_role or not custom_weights:
        return default

    weight = custom_weights.get(declared_role)
    if weight is None:
        return default

    return max(float(weight), 0.0)


def mean_feedback_weight(weights: list[Optional[float]], default: float = DEFAULT_FEEDBACK_WEIGHT) -> float:
    """Arithmetic mean of comment weights; missing weights count as ``default``."""
    if not weights:
        return default
    return sum(default if w is None else w for w in weights) / len(weights)
