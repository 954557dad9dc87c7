"""Mail relays: admin newsletter fan-out and the signup approval request."""
from fastapi import APIRouter, Depends

from namsan_portal.deps import (AdminNotifierDep, CurrentUser,
                                NewsletterServiceDep, VerifiedClaims,
                                use_success_envelope)
from namsan_portal.schemas import (EnvelopeErrorResponse, ErrorResponse,
                                   NewsletterRequest, NewsletterResponse,
                                   SignupNotificationRequest,
                                   SignupNotificationResponse)

router = APIRouter(tags=["mail"])


@router.post(
    "/send-newsletter",
    response_model=NewsletterResponse,
    responses={status: {"model": ErrorResponse} for status in (400, 401, 403, 500)},
)
async def send_newsletter(
    body: NewsletterRequest, user: CurrentUser, service: NewsletterServiceDep
) -> NewsletterResponse:
    """Send a newsletter to every approved user. Admins only."""
    service.require_admin(user.id)
    result = await service.send(user.id, body.subject, body.html_content, body.newsletter_id)
    return NewsletterResponse(
        sent_count=result.sent_count, total_recipients=result.total_recipients
    )


@router.post(
    "/notify-admin-signup",
    response_model=SignupNotificationResponse,
    dependencies=[Depends(use_success_envelope)],
    responses={status: {"model": EnvelopeErrorResponse} for status in (400, 401, 403, 500)},
)
async def notify_admin_signup(
    body: SignupNotificationRequest, claims: VerifiedClaims, notifier: AdminNotifierDep
) -> SignupNotificationResponse:
    """Tell the administrator that the caller signed up and awaits approval."""
    reply = await notifier.notify_signup(claims, body)
    return SignupNotificationResponse(data=reply)
