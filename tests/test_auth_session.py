"""Tests for the client auth session: profile races, idle and manual sign-out."""
import asyncio
import json

import httpx
import pytest
from conftest import AUTH_URL, FakeClock

from namsan_portal.client import AuthSession
from namsan_portal.db import Profile
from namsan_portal.providers import IdentityProvider

HOUR = 60 * 60


def auth_api(request: httpx.Request) -> httpx.Response:
    """Minimal auth API: password grant echoes a user derived from the e-mail."""
    path = request.url.path
    if path.endswith("/token"):
        email = json.loads(request.content)["email"]
        return httpx.Response(
            200,
            json={
                "access_token": f"token-{email}",
                "token_type": "bearer",
                "expires_in": 3600,
                "refresh_token": "refresh",
                "user": {"id": f"id-{email.split('@')[0]}", "email": email},
            },
        )
    if path.endswith("/logout"):
        return httpx.Response(204)
    if path.endswith("/signup"):
        body = json.loads(request.content)
        return httpx.Response(200, json={"id": "id-new", "email": body["email"]})
    return httpx.Response(404)


class ProfileLoaderStub:
    """Async profile loader whose answers can be held back per user."""

    def __init__(self):
        self.calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.failures: set[str] = set()

    def hold(self, user_id):
        self.gates[user_id] = asyncio.Event()
        return self.gates[user_id]

    async def __call__(self, user_id):
        self.calls.append(user_id)
        gate = self.gates.get(user_id)
        if gate is not None:
            await gate.wait()
        if user_id in self.failures:
            raise RuntimeError("profile table unavailable")
        return Profile(user_id=user_id, email=f"{user_id}@example.com", is_approved=True)


@pytest.fixture
def identity(auth_upstream):
    auth_upstream.handler = auth_api
    return IdentityProvider(AUTH_URL, "anon-key", transport=auth_upstream.transport)


@pytest.fixture
def loader():
    return ProfileLoaderStub()


def logout_calls(upstream):
    return [r for r in upstream.requests if r.url.path.endswith("/logout")]


class TestSignIn:
    def test_sign_in_sets_user_then_profile(self, identity, loader, scheduler):
        async def scenario():
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            assert session.loading is False
            assert session.user is None

            await session.sign_in("alice@example.com", "pw")
            assert session.user.id == "id-alice"
            assert session.monitor.armed
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.profile.user_id == "id-alice"
        assert loader.calls == ["id-alice"]

    def test_start_restores_existing_session(self, identity, loader, scheduler):
        async def scenario():
            await identity.sign_in_with_password("alice@example.com", "pw")
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            return session

        session = asyncio.run(scenario())
        assert session.user.id == "id-alice"
        assert session.profile is not None
        assert session.loading is False

    def test_expired_session_is_not_restored(self, auth_upstream, loader, scheduler):
        clock = FakeClock(1_000.0)
        identity = IdentityProvider(
            AUTH_URL, "anon-key", transport=auth_upstream.transport, clock=clock
        )
        auth_upstream.handler = auth_api

        async def scenario():
            await identity.sign_in_with_password("alice@example.com", "pw")
            clock.now += HOUR + 1
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            return session

        session = asyncio.run(scenario())
        assert session.user is None
        assert loader.calls == []

    def test_listeners_hear_user_changes(self, identity, loader, scheduler):
        seen = []

        async def scenario():
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            session.subscribe(lambda user: seen.append(user.id if user else None))
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            await session.sign_out()
            await session.settle()

        asyncio.run(scenario())
        assert seen == ["id-alice", None]

    def test_failed_profile_fetch_leaves_profile_empty(self, identity, loader, scheduler):
        loader.failures.add("id-alice")

        async def scenario():
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.user.id == "id-alice"
        assert session.profile is None

    def test_needs_a_profile_source(self, identity):
        with pytest.raises(ValueError):
            AuthSession(identity)


class TestProfileRace:
    def test_sign_out_discards_in_flight_profile(self, identity, loader, scheduler):
        async def scenario():
            gate = loader.hold("id-alice")
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            await session.sign_out()
            gate.set()
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.user is None
        assert session.profile is None

    def test_account_switch_keeps_the_newest_profile(self, identity, loader, scheduler):
        async def scenario():
            gate = loader.hold("id-alice")
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            await session.sign_in("bob@example.com", "pw")
            await asyncio.sleep(0)
            gate.set()
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.user.id == "id-bob"
        assert session.profile.user_id == "id-bob"


class TestIdleSignOut:
    def test_forced_sign_out_after_an_hour(self, identity, loader, scheduler, auth_upstream):
        async def scenario():
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            scheduler.advance(HOUR)
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.user is None
        assert session.session is None
        assert len(logout_calls(auth_upstream)) == 1
        assert asyncio.run(identity.get_session()) is None

    def test_manual_sign_out_before_expiry_cancels_the_timer(
        self, identity, loader, scheduler, auth_upstream
    ):
        async def scenario():
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            scheduler.advance(HOUR / 2)
            await session.sign_out()
            scheduler.advance(2 * HOUR)
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.user is None
        assert scheduler.pending() == []
        assert len(logout_calls(auth_upstream)) == 1

    def test_old_timer_cannot_sign_out_the_next_user(self, identity, loader, scheduler):
        async def scenario():
            session = AuthSession(identity, profile_loader=loader, scheduler=scheduler)
            await session.start()
            await session.sign_in("alice@example.com", "pw")
            stale = scheduler.timers[-1]
            await session.sign_out()
            await session.sign_in("bob@example.com", "pw")
            stale.callback()
            await session.settle()
            return session

        session = asyncio.run(scenario())
        assert session.user.id == "id-bob"


class TestSignUp:
    def test_sign_up_sends_full_name_and_redirect(self, identity, loader, auth_upstream):
        async def scenario():
            session = AuthSession(
                identity,
                profile_loader=loader,
                email_redirect_to="https://portal.test/",
            )
            return await session.sign_up("new@example.com", "pw", "New User")

        result = asyncio.run(scenario())
        request = auth_upstream.requests[-1]
        assert request.url.params["redirect_to"] == "https://portal.test/"
        assert json.loads(request.content)["data"] == {"full_name": "New User"}
        assert result.user.id == "id-new"
        assert result.session is None
