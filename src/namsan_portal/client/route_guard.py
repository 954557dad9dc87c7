"""Access decision for protected dashboard pages."""
from enum import Enum

from namsan_portal.db import Profile
from namsan_portal.providers import AuthUser

LOGIN_PATH = "/login"
PENDING_APPROVAL_PATH = "/pending-approval"


class RouteDecision(str, Enum):
    LOADING = "loading"
    REDIRECT_LOGIN = "redirect_login"
    REDIRECT_PENDING = "redirect_pending"
    ALLOW = "allow"

    @property
    def redirect_to(self) -> str | None:
        if self is RouteDecision.REDIRECT_LOGIN:
            return LOGIN_PATH
        if self is RouteDecision.REDIRECT_PENDING:
            return PENDING_APPROVAL_PATH
        return None


def resolve_route(
    user: AuthUser | None,
    profile: Profile | None,
    loading: bool,
    path: str,
    *,
    require_approval: bool = True,
) -> RouteDecision:
    """Decide what a protected page shows.

    Unapproved non-admin users go to the pending-approval page, which itself
    never redirects. While the profile has not arrived yet the user passes.
    """
    if loading:
        return RouteDecision.LOADING
    if user is None:
        return RouteDecision.REDIRECT_LOGIN
    if (
        require_approval
        and profile is not None
        and not profile.is_approved
        and not profile.is_admin
        and path != PENDING_APPROVAL_PATH
    ):
        return RouteDecision.REDIRECT_PENDING
    return RouteDecision.ALLOW
