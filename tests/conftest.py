"""
Shared fixtures: in-memory store, fake upstream APIs and a wired test app.
"""
import json
import time
from datetime import datetime, timezone

import httpx
import jwt
import pytest
from fastapi.testclient import TestClient

from namsan_portal.config import Settings
from namsan_portal.db import DataStore
from namsan_portal.db.sessions import create_db_engine, init_db
from namsan_portal.main import create_app, wire_services
from namsan_portal.providers import (AIGatewayProvider, IdentityProvider,
                                     PerplexityProvider, ResendProvider,
                                     YFinanceProvider)
from namsan_portal.services import FixedWindowRateLimiter

JWT_SECRET = "test-jwt-secret-for-the-portal-suite-0123456789"
AUTH_URL = "https://auth.test"


class FakeUpstream:
    """Callable for httpx.MockTransport: records requests, answers from a script.

    Replies queued with `reply` are used in order; the last one repeats.
    Set `handler` to compute the answer from the request instead.
    """

    def __init__(self, default_json=None):
        self.requests: list[httpx.Request] = []
        self.handler = None
        self._replies: list[tuple[int, dict]] = []
        if default_json is not None:
            self.reply(200, json=default_json)

    def reply(self, status_code=200, **kwargs):
        self._replies.append((status_code, kwargs))
        return self

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.handler is not None:
            return self.handler(request)
        if not self._replies:
            return httpx.Response(200, json={})
        status_code, kwargs = (
            self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        )
        return httpx.Response(status_code, **kwargs)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    def bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]


class FakeTicker:
    def __init__(self, fast_info):
        self.fast_info = fast_info


class FakeClock:
    """Settable clock; returns `now` (a float or a datetime)."""

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


class ManualTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose time only moves when the test calls advance()."""

    def __init__(self):
        self.now = 0.0
        self.timers: list[ManualTimer] = []

    def call_later(self, delay, callback):
        timer = ManualTimer(self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled]

    def advance(self, seconds):
        self.now += seconds
        due = sorted(
            (t for t in self.pending() if t.due <= self.now), key=lambda t: t.due
        )
        for timer in due:
            self.timers.remove(timer)
            if not timer.cancelled:
                timer.callback()


def make_token(sub="user-1", email="user@example.com", *, secret=JWT_SECRET,
               audience="authenticated", expires_in=3600):
    payload = {
        "sub": sub,
        "email": email,
        "role": "authenticated",
        "aud": audience,
        "exp": int(time.time()) + expires_in,
    }
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def token_factory():
    return make_token


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 5, 3, 0, tzinfo=timezone.utc)


@pytest.fixture
def settings():
    return Settings(
        supabase_url=AUTH_URL,
        supabase_anon_key="anon-key",
        supabase_jwt_secret=JWT_SECRET,
        resend_api_key="re_test",
        admin_email="admin@namsan.test",
        portal_url="https://portal.test",
    )


@pytest.fixture
def engine():
    db_engine = create_db_engine("sqlite://")
    init_db(db_engine)
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def store(engine):
    return DataStore(engine)


@pytest.fixture
def auth_upstream():
    return FakeUpstream()


@pytest.fixture
def gateway_upstream():
    return FakeUpstream()


@pytest.fixture
def perplexity_upstream():
    return FakeUpstream()


@pytest.fixture
def resend_upstream():
    return FakeUpstream(default_json={"id": "email-1"})


@pytest.fixture
def tickers():
    """Yahoo ticker -> fast_info dict; unknown tickers raise like a failed lookup."""
    return {}


@pytest.fixture
def identity(auth_upstream):
    return IdentityProvider(
        AUTH_URL, "anon-key", jwt_secret=JWT_SECRET, transport=auth_upstream.transport
    )


@pytest.fixture
def ai_gateway(gateway_upstream):
    return AIGatewayProvider("gw-key", transport=gateway_upstream.transport)


@pytest.fixture
def perplexity(perplexity_upstream):
    return PerplexityProvider("pplx-key", transport=perplexity_upstream.transport)


@pytest.fixture
def mailer(resend_upstream):
    return ResendProvider("re_test", transport=resend_upstream.transport)


@pytest.fixture
def quotes(tickers):
    def factory(ticker):
        if ticker not in tickers:
            raise KeyError(ticker)
        return FakeTicker(tickers[ticker])

    return YFinanceProvider(ticker_factory=factory)


@pytest.fixture
def limiter():
    return FixedWindowRateLimiter()


@pytest.fixture
def app(settings, store, identity, ai_gateway, perplexity, mailer, quotes, limiter):
    fastapi_app = create_app(lifespan_handler=None)
    wire_services(
        fastapi_app,
        settings,
        store=store,
        identity=identity,
        ai_gateway=ai_gateway,
        perplexity=perplexity,
        mailer=mailer,
        quotes=quotes,
        limiter=limiter,
    )
    return fastapi_app


@pytest.fixture
def client(app):
    return TestClient(app)
