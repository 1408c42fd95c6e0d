"""Smart share links, recipient verification and reviewer sessions."""
import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from src.core import ShareLinkError, get_settings
from src.models import Deck, ReviewerSession, ShareRecipient, ShareType, SmartShareLink
from src.models.deck import new_id, utc_now

from ..audit import AuditAction, AuditLogger
from ..storage import DeckReviewRepository, DuplicateKeyError

logger = logging.getLogger(__name__)


class VerificationResult(BaseModel):
    success: bool
    message: str


class SharingService:
    """Issues share links and tracks who reviews through them."""

    def __init__(
        self,
        repository: DeckReviewRepository,
        audit: AuditLogger,
        token_factory: Callable[[], str] = new_id,
    ):
        self._settings = get_settings()
        self._repository = repository
        self._audit = audit
        self._token_factory = token_factory

    def create_share_link(
        self,
        deck_id: str,
        user_id: str,
        *,
        share_type: ShareType = ShareType.FEEDBACK,
        custom_weights: Optional[dict[str, float]] = None,
        target_roles: Optional[list[str]] = None,
        focus_areas: Optional[list[str]] = None,
        ai_analysis_enabled: bool = True,
        requires_verification: bool = False,
        allow_anonymous_feedback: bool = False,
        expires_at: Optional[datetime] = None,
    ) -> SmartShareLink:
        """
        Issue a new share link, retrying with a fresh token on collision.

        Raises:
            ShareLinkError: if every attempt collided
        """
        attempts = self._settings.share_token_max_attempts
        for attempt in range(1, attempts + 1):
            link = SmartShareLink(
                deck_id=deck_id,
                share_token=self._token_factory(),
                share_type=share_type,
                custom_weights=custom_weights or {},
                target_roles=target_roles or [],
                focus_areas=focus_areas or [],
                ai_analysis_enabled=ai_analysis_enabled,
                requires_verification=requires_verification,
                allow_anonymous_feedback=allow_anonymous_feedback,
                created_by=user_id,
                expires_at=expires_at,
            )
            try:
                stored = self._repository.insert_share_link(link)
            except DuplicateKeyError:
                logger.warning(
                    f"Share token collision for {link.share_token}, retrying... (Attempt {attempt})"
                )
                continue

            self._audit.log(
                deck_id,
                AuditAction.SHARE_LINK_CREATED,
                {"shareLinkId": stored.id, "shareType": stored.share_type.value},
                user_id=user_id,
            )
            return stored

        raise ShareLinkError(
            "Failed to create smart share link after multiple attempts due to token collision"
        )

    def get_share_link(self, share_token: str) -> Optional[SmartShareLink]:
        return self._repository.get_share_link(share_token)

    def get_deck_by_share_token(self, share_token: str) -> Optional[tuple[Deck, SmartShareLink]]:
        """Resolve a share token to its deck; expired or unknown tokens give None."""
        link = self._repository.get_share_link(share_token)
        if link is None:
            return None
        if link.is_expired():
            logger.warning(f"Share link {share_token} has expired.")
            return None

        deck = self._repository.get_deck(link.deck_id)
        if deck is None:
            return None
        return deck, link

    def add_share_recipients(
        self,
        share_link_id: str,
        recipients: list[ShareRecipient],
    ) -> list[ShareRecipient]:
        if not recipients:
            return []
        prepared = [r.model_copy(update={"share_link_id": share_link_id}) for r in recipients]
        return self._repository.insert_share_recipients(prepared)

    def verify_recipient_access(
        self,
        share_token: str,
        email_or_phone: str,
        access_code: str,
    ) -> VerificationResult:
        """Check a recipient's access code and mark them verified."""
        link = self._repository.get_share_link(share_token)
        if link is None or link.is_expired():
            return VerificationResult(success=False, message="Invalid or expired share link.")

        field = "email" if "@" in email_or_phone else "phone"
        recipient = self._repository.find_share_recipient(link.id, field, email_or_phone)
        if recipient is None:
            return VerificationResult(
                success=False, message="You are not on the recipient list for this deck."
            )

        if recipient.verified_at:
            return VerificationResult(success=True, message="Already verified.")

        if recipient.access_code != access_code:
            return VerificationResult(success=False, message="Invalid access code.")

        recipient.verified_at = utc_now()
        self._repository.update_share_recipient(recipient)
        return VerificationResult(success=True, message="Verification successful.")

    def create_or_update_reviewer_session(
        self,
        share_token: str,
        session_id: str,
        *,
        declared_role: Optional[str] = None,
        reviewer_name: Optional[str] = None,
        reviewer_email: Optional[str] = None,
        expertise_level: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> ReviewerSession:
        """Upsert a reviewer session keyed by its client session id."""
        session = ReviewerSession(
            share_token=share_token,
            session_id=session_id,
            declared_role=declared_role,
            reviewer_name=reviewer_name,
            reviewer_email=reviewer_email,
            expertise_level=expertise_level,
            user_id=user_id,
            last_activity_at=utc_now(),
        )
        return self._repository.upsert_reviewer_session(session)

    def get_reviewer_session_by_session_id(self, session_id: str) -> Optional[ReviewerSession]:
        return self._repository.get_reviewer_session_by_session_id(session_id)
