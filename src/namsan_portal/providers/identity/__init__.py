from namsan_portal.providers.identity.identity_provider import (
    IdentityError, IdentityProvider)
from namsan_portal.providers.identity.models import (AuthEvent,
                                                     AuthSessionData,
                                                     AuthUser, Claims,
                                                     SignUpResult)

__all__ = [
    "AuthEvent",
    "AuthSessionData",
    "AuthUser",
    "Claims",
    "IdentityError",
    "IdentityProvider",
    "SignUpResult",
]
