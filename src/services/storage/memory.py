"""In-process repository used for local runs and tests."""
import copy
import logging
import threading
from collections import defaultdict
from typing import Any, Callable, Optional

from src.core.exceptions import ConcurrentModificationError, InvalidTransitionError
from src.models import (
    AuditLogEntry,
    Deck,
    DeckComment,
    FeedbackInsight,
    ReviewerSession,
    ShareRecipient,
    SmartShareLink,
)
from src.models.deck import utc_now

from .base import CommentChangeListener, DeckReviewRepository, DuplicateKeyError

logger = logging.getLogger(__name__)


class InMemoryRepository(DeckReviewRepository):
    """Dict-backed repository. Every read returns a copy so callers never share state."""

    def __init__(self):
        self._lock = threading.RLock()
        self._decks: dict[str, Deck] = {}
        self._comments: dict[str, DeckComment] = {}
        self._proposals: dict[str, dict[str, Any]] = {}
        self._share_links: dict[str, SmartShareLink] = {}
        self._recipients: dict[str, ShareRecipient] = {}
        self._sessions: dict[str, ReviewerSession] = {}
        self._insights: list[FeedbackInsight] = []
        self.audit_log: list[AuditLogEntry] = []
        self._listeners: dict[str, list[CommentChangeListener]] = defaultdict(list)

    # -------------------------------------------------------------------------
    # Decks
    # -------------------------------------------------------------------------

    def get_deck(self, deck_id: str) -> Optional[Deck]:
        with self._lock:
            deck = self._decks.get(deck_id)
            return deck.model_copy(deep=True) if deck else None

    def save_deck(self, deck: Deck, expected_version: Optional[int] = None) -> Deck:
        with self._lock:
            current = self._decks.get(deck.id)
            current_version = current.version if current else 0
            if expected_version is not None and expected_version != current_version:
                raise ConcurrentModificationError(deck.id, expected_version, current_version)

            stored = deck.model_copy(deep=True)
            stored.version = current_version + 1
            stored.updated_at = utc_now()
            if current:
                stored.created_at = current.created_at
            self._decks[deck.id] = stored
            return stored.model_copy(deep=True)

    def delete_deck(self, deck_id: str) -> None:
        with self._lock:
            self._decks.pop(deck_id, None)

    # -------------------------------------------------------------------------
    # Comments
    # -------------------------------------------------------------------------

    def insert_comment(self, comment: DeckComment) -> DeckComment:
        with self._lock:
            if comment.id in self._comments:
                raise DuplicateKeyError(f"Comment {comment.id} already exists")
            self._comments[comment.id] = comment.model_copy(deep=True)
        self._notify(comment.deck_id, "INSERT", comment.id)
        return comment.model_copy(deep=True)

    def update_comment(self, comment: DeckComment) -> DeckComment:
        with self._lock:
            self._comments[comment.id] = comment.model_copy(deep=True)
        self._notify(comment.deck_id, "UPDATE", comment.id)
        return comment.model_copy(deep=True)

    def delete_comment(self, comment_id: str) -> None:
        with self._lock:
            removed = self._comments.pop(comment_id, None)
        if removed:
            self._notify(removed.deck_id, "DELETE", comment_id)

    def get_comment(self, comment_id: str) -> Optional[DeckComment]:
        with self._lock:
            comment = self._comments.get(comment_id)
            return comment.model_copy(deep=True) if comment else None

    def list_comments(self, deck_id: str, slide_id: Optional[str] = None) -> list[DeckComment]:
        with self._lock:
            comments = [
                c.model_copy(deep=True) for c in self._comments.values()
                if c.deck_id == deck_id and (slide_id is None or c.slide_id == slide_id)
            ]
        return sorted(comments, key=lambda c: c.created_at)

    def subscribe_comments(self, deck_id: str, listener: CommentChangeListener) -> Callable[[], None]:
        with self._lock:
            self._listeners[deck_id].append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners[deck_id]:
                    self._listeners[deck_id].remove(listener)

        return unsubscribe

    def _notify(self, deck_id: str, event: str, comment_id: str) -> None:
        with self._lock:
            listeners = list(self._listeners.get(deck_id, []))
        for listener in listeners:
            try:
                listener(event, comment_id)
            except Exception as e:
                logger.error(f"Comment listener failed for deck {deck_id}: {e}")

    # -------------------------------------------------------------------------
    # Proposals
    # -------------------------------------------------------------------------

    def insert_proposal(self, record: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            if record["id"] in self._proposals:
                raise DuplicateKeyError(f"Proposal {record['id']} already exists")
            self._proposals[record["id"]] = copy.deepcopy(record)
            return copy.deepcopy(record)

    def update_proposal(
        self,
        proposal_id: str,
        updates: dict[str, Any],
        expected_status: Optional[str] = None,
    ) -> Optional[dict[str, Any]]:
        with self._lock:
            record = self._proposals.get(proposal_id)
            if record is None:
                return None
            if expected_status is not None and record["status"] != expected_status:
                raise InvalidTransitionError(proposal_id, record["status"], updates.get("status", record["status"]))
            record.update(copy.deepcopy(updates))
            return copy.deepcopy(record)

    def get_proposal(self, proposal_id: str) -> Optional[dict[str, Any]]:
        with self._lock:
            record = self._proposals.get(proposal_id)
            return copy.deepcopy(record) if record else None

    def list_proposals(
        self,
        deck_id: str,
        slide_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        with self._lock:
            records = [
                copy.deepcopy(r) for r in self._proposals.values()
                if r["deck_id"] == deck_id
                and (slide_id is None or r["slide_id"] == slide_id)
                and (status is None or r["status"] == status)
            ]
        return sorted(records, key=lambda r: r["created_at"], reverse=True)

    # -------------------------------------------------------------------------
    # Sharing
    # -------------------------------------------------------------------------

    def insert_share_link(self, link: SmartShareLink) -> SmartShareLink:
        with self._lock:
            if link.share_token in self._share_links:
                raise DuplicateKeyError(f"Share token {link.share_token} already exists")
            self._share_links[link.share_token] = link.model_copy(deep=True)
            return link.model_copy(deep=True)

    def get_share_link(self, share_token: str) -> Optional[SmartShareLink]:
        with self._lock:
            link = self._share_links.get(share_token)
            return link.model_copy(deep=True) if link else None

    def insert_share_recipients(self, recipients: list[ShareRecipient]) -> list[ShareRecipient]:
        with self._lock:
            for recipient in recipients:
                self._recipients[recipient.id] = recipient.model_copy(deep=True)
            return [r.model_copy(deep=True) for r in recipients]

    def find_share_recipient(self, share_link_id: str, field: str, value: str) -> Optional[ShareRecipient]:
        with self._lock:
            for recipient in self._recipients.values():
                if recipient.share_link_id == share_link_id and getattr(recipient, field, None) == value:
                    return recipient.model_copy(deep=True)
        return None

    def update_share_recipient(self, recipient: ShareRecipient) -> ShareRecipient:
        with self._lock:
            self._recipients[recipient.id] = recipient.model_copy(deep=True)
            return recipient.model_copy(deep=True)

    def upsert_reviewer_session(self, session: ReviewerSession) -> ReviewerSession:
        with self._lock:
            existing = next(
                (s for s in self._sessions.values() if s.session_id == session.session_id), None
            )
            if existing:
                updates = session.model_dump(
                    exclude={"id", "session_id", "created_at"}, exclude_none=True
                )
                merged = existing.model_copy(update={**updates, "updated_at": utc_now()})
            else:
                merged = session.model_copy(deep=True)
            self._sessions[merged.id] = merged
            return merged.model_copy(deep=True)

    def get_reviewer_session(self, reviewer_session_id: str) -> Optional[ReviewerSession]:
        with self._lock:
            session = self._sessions.get(reviewer_session_id)
            return session.model_copy(deep=True) if session else None

    def get_reviewer_session_by_session_id(self, session_id: str) -> Optional[ReviewerSession]:
        with self._lock:
            for session in self._sessions.values():
                if session.session_id == session_id:
                    return session.model_copy(deep=True)
        return None

    # -------------------------------------------------------------------------
    # Analytics and audit
    # -------------------------------------------------------------------------

    def insert_insight(self, insight: FeedbackInsight) -> FeedbackInsight:
        with self._lock:
            self._insights.append(insight.model_copy(deep=True))
            return insight.model_copy(deep=True)

    def list_insights(self, deck_id: str) -> list[FeedbackInsight]:
        with self._lock:
            return [i.model_copy(deep=True) for i in self._insights if i.deck_id == deck_id]

    def append_audit_log(self, entry: AuditLogEntry) -> None:
        with self._lock:
            self.audit_log.append(entry.model_copy(deep=True))

    def audit_actions(self, deck_id: Optional[str] = None) -> list[str]:
        """Action types logged so far, oldest first."""
        with self._lock:
            return [e.action_type for e in self.audit_log if deck_id is None or e.deck_id == deck_id]
