"""One-off e-mails to the portal administrator."""
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from namsan_portal.errors import BadRequest, Forbidden
from namsan_portal.providers import (UPSTREAM_EXCEPTIONS, Claims,
                                     EmailMessage, ResendProvider,
                                     UpstreamErrorMapper)
from namsan_portal.schemas import IndexRefreshResult, SignupNotificationRequest
from namsan_portal.services.templates import (index_failure_html,
                                              signup_notification_html)
from namsan_portal.utils import utcnow

logger = logging.getLogger(__name__)

KST = ZoneInfo("Asia/Seoul")

RESEND_ERRORS = UpstreamErrorMapper(api_name="Resend", passthrough_statuses=frozenset())


class AdminNotifier:
    """Signup approval requests and index refresh alerts for the admin inbox."""

    def __init__(
        self,
        mailer: ResendProvider,
        *,
        sender: str,
        admin_email: str,
        portal_url: str,
        error_mapper: UpstreamErrorMapper = RESEND_ERRORS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._mailer = mailer
        self._sender = sender
        self._admin_email = admin_email
        self._portal_url = portal_url.rstrip("/")
        self._error_mapper = error_mapper
        self._clock = clock

    async def notify_signup(
        self, claims: Claims, request: SignupNotificationRequest
    ) -> dict[str, Any]:
        """Ask the admin to approve a new account.

        Only the account owner may announce itself: the e-mail in the body
        must match the token's e-mail (case-insensitive) when the token has one.

        Raises:
            BadRequest: userName or userEmail missing.
            Forbidden: body e-mail differs from the authenticated one.
        """
        if not request.user_name or not request.user_email:
            raise BadRequest("Missing required fields: userName and userEmail")
        if claims.email and request.user_email.lower() != claims.email.lower():
            logger.warning(
                "Email mismatch: authenticated=%s, requested=%s",
                claims.email,
                request.user_email,
            )
            raise Forbidden("Email mismatch - unauthorized")

        html = signup_notification_html(
            name=request.user_name,
            email=request.user_email,
            phone=request.user_phone,
            address=request.user_address,
            birthday=request.user_birthday,
            signup_date=request.signup_date,
            admin_url=f"{self._portal_url}/admin",
            year=self._clock().year,
        )
        message = EmailMessage(
            sender=self._sender,
            to=[self._admin_email],
            subject=f"[Namsan Korea] 신규 가입 승인 요청 - {request.user_name}",
            html=html,
        )
        try:
            reply = await self._mailer.send_email(message)
        except UPSTREAM_EXCEPTIONS as e:
            self._error_mapper.raise_relay(e)
        logger.info("Admin signup notification sent for %s", request.user_email)
        return reply

    async def notify_index_failures(
        self, failed: list[IndexRefreshResult], total: int
    ) -> bool:
        """Alert the admin about indices left without data. Never raises.

        Returns:
            True if the alert was sent.
        """
        if not self._mailer.configured:
            logger.warning("%s not configured, skipping failure notification",
                           ResendProvider.ENV_KEY_NAME)
            return False
        updated_at = self._clock().astimezone(KST).strftime("%Y.%m.%d %H:%M")
        html = index_failure_html(
            [(r.name, r.symbol, r.error or "Unknown error") for r in failed], total, updated_at
        )
        message = EmailMessage(
            sender=self._sender,
            to=[self._admin_email],
            subject=f"[Namsan Korea] 시장 지수 업데이트 실패 알림 - {len(failed)}/{total} 지수",
            html=html,
        )
        try:
            await self._mailer.send_email(message)
        except UPSTREAM_EXCEPTIONS as e:
            logger.error("Failed to send index failure notification: %s", e)
            return False
        return True
