"""Tests for the protected-page access decision."""
import pytest

from namsan_portal.client import RouteDecision, resolve_route
from namsan_portal.client.route_guard import LOGIN_PATH, PENDING_APPROVAL_PATH
from namsan_portal.db import Profile
from namsan_portal.providers import AuthUser

USER = AuthUser(id="user-1", email="user@example.com")


def profile(**kwargs):
    return Profile(user_id="user-1", email="user@example.com", **kwargs)


class TestResolveRoute:
    def test_loading_waits(self):
        assert resolve_route(None, None, True, "/dashboard") is RouteDecision.LOADING

    def test_anonymous_goes_to_login(self):
        decision = resolve_route(None, None, False, "/dashboard")
        assert decision is RouteDecision.REDIRECT_LOGIN
        assert decision.redirect_to == LOGIN_PATH

    def test_unapproved_user_goes_to_pending_page(self):
        decision = resolve_route(USER, profile(is_approved=False), False, "/dashboard")
        assert decision is RouteDecision.REDIRECT_PENDING
        assert decision.redirect_to == PENDING_APPROVAL_PATH

    def test_pending_page_never_redirects_to_itself(self):
        decision = resolve_route(USER, profile(is_approved=False), False, PENDING_APPROVAL_PATH)
        assert decision is RouteDecision.ALLOW

    @pytest.mark.parametrize(
        "fields",
        [{"is_approved": True}, {"is_admin": True}],
        ids=["approved", "admin"],
    )
    def test_approved_users_and_admins_pass(self, fields):
        assert resolve_route(USER, profile(**fields), False, "/dashboard") is RouteDecision.ALLOW

    def test_missing_profile_does_not_block(self):
        assert resolve_route(USER, None, False, "/dashboard") is RouteDecision.ALLOW

    def test_approval_check_can_be_disabled(self):
        decision = resolve_route(
            USER, profile(is_approved=False), False, "/settings", require_approval=False
        )
        assert decision is RouteDecision.ALLOW
        assert decision.redirect_to is None
