from namsan_portal.providers.resend.models import EmailMessage
from namsan_portal.providers.resend.resend_provider import ResendProvider

__all__ = ["EmailMessage", "ResendProvider"]
