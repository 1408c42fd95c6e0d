"""Best-effort audit trail of deck content interactions."""
import logging
from typing import Any, Optional

from src.models import AuditLogEntry

from ..storage import DeckReviewRepository

logger = logging.getLogger(__name__)


class AuditAction:
    """Action type names written to the audit log."""

    DECK_SAVE = "DECK_SAVE"
    DECK_SAVE_FAILED = "DECK_SAVE_FAILED"
    COMMENT_ADD = "COMMENT_ADD"
    COMMENT_ADD_FAILED = "COMMENT_ADD_FAILED"
    COMMENT_UPDATE = "COMMENT_UPDATE"
    COMMENT_DELETE = "COMMENT_DELETE"
    AI_AGGREGATED_INSIGHTS_GENERATED = "AI_AGGREGATED_INSIGHTS_GENERATED"
    AI_AGGREGATED_INSIGHTS_FAILED = "AI_AGGREGATED_INSIGHTS_FAILED"
    AI_PROPOSAL_GENERATED = "AI_PROPOSAL_GENERATED"
    AI_PROPOSAL_INSERT_FAILED = "AI_PROPOSAL_INSERT_FAILED"
    AI_PROPOSAL_ACCEPTED = "AI_PROPOSAL_ACCEPTED"
    AI_PROPOSAL_REJECTED = "AI_PROPOSAL_REJECTED"
    AI_PROPOSAL_MODIFIED = "AI_PROPOSAL_MODIFIED"
    AI_PROPOSAL_ARCHIVED = "AI_PROPOSAL_ARCHIVED"
    AI_PROPOSAL_STATUS_UPDATE_FAILED = "AI_PROPOSAL_STATUS_UPDATE_FAILED"
    AI_PROPOSAL_APPLIED = "AI_PROPOSAL_APPLIED"
    AI_PROPOSAL_ACCEPTED_NO_OP = "AI_PROPOSAL_ACCEPTED_NO_OP"
    AI_PROPOSAL_APPLY_FAILED = "AI_PROPOSAL_APPLY_FAILED"
    SHARE_LINK_CREATED = "SHARE_LINK_CREATED"


class AuditLogger:
    """
    Writes audit entries without ever failing the caller.

    A failed write is reported through the application log at ERROR level
    with the full entry, so the record survives in the log sink even when the
    audit table is unreachable.
    """

    def __init__(self, repository: DeckReviewRepository):
        self._repository = repository
        self.failed_count = 0

    def log(
        self,
        deck_id: str,
        action_type: str,
        details: Optional[dict[str, Any]] = None,
        user_id: Optional[str] = None,
        slide_id: Optional[str] = None,
        element_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> bool:
        """Append an entry. Returns False if the write failed."""
        entry = AuditLogEntry(
            deck_id=deck_id,
            action_type=action_type,
            details=details or {},
            user_id=user_id,
            slide_id=slide_id,
            element_id=element_id,
            session_id=session_id,
        )
        try:
            self._repository.append_audit_log(entry)
            return True
        except Exception as e:
            self.failed_count += 1
            logger.error(
                f"Logging failed for {action_type}: {e} | entry={entry.model_dump_json()}"
            )
            return False
