"""Newsletter fan-out to approved users via Resend."""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from namsan_portal.db import DataStore, Newsletter, Profile, UserRole
from namsan_portal.errors import BadRequest, Forbidden, UpstreamUnavailable
from namsan_portal.providers import (UPSTREAM_EXCEPTIONS, EmailMessage,
                                     ResendProvider)
from namsan_portal.services.templates import newsletter_html
from namsan_portal.utils import batched, utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerRecipientFailure:
    email: str
    reason: str


@dataclass
class NewsletterResult:
    sent_count: int
    total_recipients: int
    failures: list[PerRecipientFailure] = field(default_factory=list)


class NewsletterService:
    """Admin-only send of one HTML newsletter to every approved profile.

    Each recipient gets an individual message so addresses are never exposed
    to each other. A failed recipient is logged and skipped.
    """

    def __init__(
        self,
        mailer: ResendProvider,
        store: DataStore,
        *,
        sender: str,
        batch_size: int = 50,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._mailer = mailer
        self._store = store
        self._sender = sender
        self._batch_size = batch_size
        self._clock = clock

    def require_admin(self, user_id: str) -> None:
        """Raise Forbidden unless `user_id` holds an admin role row."""
        rows = (
            self._store.table(UserRole)
            .eq("user_id", user_id)
            .eq("role", "admin")
            .limit(1)
            .execute()
        )
        if not rows:
            raise Forbidden("Admin access required")

    def recipients(self) -> list[str]:
        profiles = self._store.table(Profile).eq("is_approved", True).execute()
        return [p.email for p in profiles if p.email]

    async def send(
        self,
        sent_by: str,
        subject: str,
        html_content: str,
        newsletter_id: str | None = None,
    ) -> NewsletterResult:
        """Send the newsletter and, when `newsletter_id` is given, mark it sent.

        Raises:
            BadRequest: missing subject/content or no approved recipients.
            UpstreamUnavailable: the mail provider is not configured.
        """
        if not subject or not html_content:
            raise BadRequest("Missing subject or content")
        if not self._mailer.configured:
            raise UpstreamUnavailable(f"{ResendProvider.ENV_KEY_NAME} is not configured")
        emails = self.recipients()
        if not emails:
            raise BadRequest("No approved recipients found")

        now = self._clock()
        html = newsletter_html(html_content, now.year)
        result = NewsletterResult(sent_count=0, total_recipients=len(emails))
        for batch in batched(emails, self._batch_size):
            for email in batch:
                message = EmailMessage(sender=self._sender, to=[email], subject=subject, html=html)
                try:
                    await self._mailer.send_email(message)
                except UPSTREAM_EXCEPTIONS as e:
                    logger.error("Failed to send newsletter to %s: %s", email, e)
                    result.failures.append(PerRecipientFailure(email=email, reason=str(e)))
                    continue
                result.sent_count += 1

        if newsletter_id:
            self._store.table(Newsletter).eq("id", newsletter_id).update(
                {
                    "sent_at": now,
                    "sent_by": sent_by,
                    "recipient_count": result.sent_count,
                    "status": "sent",
                }
            )
        logger.info(
            "Newsletter %r sent to %d/%d recipients",
            subject,
            result.sent_count,
            result.total_recipients,
        )
        return result
