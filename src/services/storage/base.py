"""Persistence collaborator interface for decks, feedback and proposals."""
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from src.models import (
    AuditLogEntry,
    Deck,
    DeckComment,
    FeedbackInsight,
    ReviewerSession,
    ShareRecipient,
    SmartShareLink,
)

# Called with (event, comment_id) where event is INSERT, UPDATE or DELETE.
CommentChangeListener = Callable[[str, str], None]


class StorageError(Exception):
    """Raised by repositories when a write or read fails."""


class DuplicateKeyError(StorageError):
    """Raised when a unique key (share token, record id) already exists."""


class DeckReviewRepository(ABC):
    """
    Load/save primitives used by the review engine.

    Decks are stored as whole documents. ``save_deck`` implements optimistic
    concurrency: when ``expected_version`` is given and differs from the stored
    version the save is refused with ``ConcurrentModificationError``.
    Proposals are stored as flat records (see ``DeckAiUpdateProposal.to_record``).
    ``update_proposal`` with ``expected_status`` refuses the write with
    ``InvalidTransitionError`` unless the stored status still matches.
    """

    # Decks

    @abstractmethod
    def get_deck(self, deck_id: str) -> Optional[Deck]: ...

    @abstractmethod
    def save_deck(self, deck: Deck, expected_version: Optional[int] = None) -> Deck: ...

    @abstractmethod
    def delete_deck(self, deck_id: str) -> None: ...

    # Comments

    @abstractmethod
    def insert_comment(self, comment: DeckComment) -> DeckComment: ...

    @abstractmethod
    def update_comment(self, comment: DeckComment) -> DeckComment: ...

    @abstractmethod
    def delete_comment(self, comment_id: str) -> None: ...

    @abstractmethod
    def get_comment(self, comment_id: str) -> Optional[DeckComment]: ...

    @abstractmethod
    def list_comments(self, deck_id: str, slide_id: Optional[str] = None) -> list[DeckComment]: ...

    @abstractmethod
    def subscribe_comments(self, deck_id: str, listener: CommentChangeListener) -> Callable[[], None]: ...

    # Proposals

    @abstractmethod
    def insert_proposal(self, record: dict[str, Any]) -> dict[str, Any]: ...

    @abstractmethod
    def update_proposal(
        self,
        proposal_id: str,
        updates: dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[dict[str, Any]]: ...

    @abstractmethod
    def get_proposal(self, proposal_id: str) -> Optional[dict[str, Any]]: ...

    @abstractmethod
    def list_proposals(
        self,
        deck_id: str,
        slide_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict[str, Any]]: ...

    # Sharing

    @abstractmethod
    def insert_share_link(self, link: SmartShareLink) -> SmartShareLink: ...

    @abstractmethod
    def get_share_link(self, share_token: str) -> Optional[SmartShareLink]: ...

    @abstractmethod
    def insert_share_recipients(self, recipients: list[ShareRecipient]) -> list[ShareRecipient]: ...

    @abstractmethod
    def find_share_recipient(self, share_link_id: str, field: str, value: str) -> Optional[ShareRecipient]: ...

    @abstractmethod
    def update_share_recipient(self, recipient: ShareRecipient) -> ShareRecipient: ...

    @abstractmethod
    def upsert_reviewer_session(self, session: ReviewerSession) -> ReviewerSession: ...

    @abstractmethod
    def get_reviewer_session(self, reviewer_session_id: str) -> Optional[ReviewerSession]: ...

    @abstractmethod
    def get_reviewer_session_by_session_id(self, session_id: str) -> Optional[ReviewerSession]: ...

    # Analytics and audit

    @abstractmethod
    def insert_insight(self, insight: FeedbackInsight) -> FeedbackInsight: ...

    @abstractmethod
    def list_insights(self, deck_id: str) -> list[FeedbackInsight]: ...

    @abstractmethod
    def append_audit_log(self, entry: AuditLogEntry) -> None: ...
