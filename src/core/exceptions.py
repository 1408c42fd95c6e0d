"""Exception hierarchy for the deck review engine."""


class DeckReviewError(Exception):
    """Base class for all deck review errors."""


class DeckNotFoundError(DeckReviewError):
    """Raised when a deck (or its owner) cannot be found."""

    def __init__(self, deck_id: str):
        super().__init__(f"Deck {deck_id} not found")
        self.deck_id = deck_id


class SlideNotFoundError(DeckReviewError):
    """Raised when a slide id does not exist in its deck."""

    def __init__(self, deck_id: str, slide_id: str):
        super().__init__(f"Slide {slide_id} not found in deck {deck_id}")
        self.deck_id = deck_id
        self.slide_id = slide_id


class ProposalNotFoundError(DeckReviewError):
    """Raised when a proposal id does not exist."""

    def __init__(self, proposal_id: str):
        super().__init__(f"Proposal {proposal_id} not found")
        self.proposal_id = proposal_id


class CommentNotFoundError(DeckReviewError):
    """Raised when a comment id does not exist."""

    def __init__(self, comment_id: str):
        super().__init__(f"Comment {comment_id} not found")
        self.comment_id = comment_id


class InvalidTransitionError(DeckReviewError):
    """Raised when a proposal status change is not allowed from its current state."""

    def __init__(self, proposal_id: str, current: str, requested: str):
        super().__init__(
            f"Proposal {proposal_id} cannot move from {current} to {requested}"
        )
        self.proposal_id = proposal_id
        self.current = current
        self.requested = requested


class ProposalPersistenceError(DeckReviewError):
    """Raised when a proposal cannot be written to the store."""


class CommentPersistenceError(DeckReviewError):
    """Raised when a comment cannot be written to the store."""


class ProposalApplyError(DeckReviewError):
    """Raised when an accepted proposal could not be written into the deck."""


class ConcurrentModificationError(ProposalApplyError):
    """Raised when a deck save loses an optimistic version check."""

    def __init__(self, deck_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Deck {deck_id} was modified concurrently "
            f"(expected version {expected_version}, found {actual_version})"
        )
        self.deck_id = deck_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class ShareLinkError(DeckReviewError):
    """Raised when a share link cannot be created or used."""
