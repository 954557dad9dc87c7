"""Identity provider backed by the hosted auth (GoTrue) REST API."""
import logging
import os
import time
from collections.abc import Callable
from typing import Any

import httpx
import jwt

from namsan_portal.providers.core import UpstreamProviderABC
from namsan_portal.providers.core.upstream_provider_abc import \
    DEFAULT_TIMEOUT_SECONDS
from namsan_portal.providers.identity.models import (AuthEvent,
                                                     AuthSessionData,
                                                     AuthUser, Claims,
                                                     SignUpResult)

logger = logging.getLogger(__name__)

AuthListener = Callable[[AuthEvent, AuthSessionData | None], None]


class IdentityError(Exception):
    """The auth API rejected a request (bad credentials, invalid token, ...)."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class IdentityProvider(UpstreamProviderABC):
    """Sign-in, sign-up, sign-out and token verification.

    Holds the current session for client-side use and notifies listeners on
    every transition. Server-side relays only use get_claims/get_user.
    """

    ENV_KEY_NAME = "SUPABASE_ANON_KEY"
    JWT_AUDIENCE = "authenticated"

    def __init__(
        self,
        supabase_url: str | None = None,
        anon_key: str | None = None,
        *,
        jwt_secret: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the identity provider.

        Args:
            supabase_url: Project URL. Defaults to SUPABASE_URL.
            anon_key: Public API key. Defaults to SUPABASE_ANON_KEY.
            jwt_secret: HS256 secret; when set, claims are verified locally.
            timeout: Seconds before auth requests give up.
            transport: Optional httpx transport (tests).
            clock: Unix-seconds clock used for session expiry.
        """
        url = (supabase_url or os.getenv("SUPABASE_URL") or "").rstrip("/")
        key = anon_key or os.getenv("SUPABASE_ANON_KEY")
        headers = {"Content-Type": "application/json"}
        if key:
            headers["apikey"] = key
        super().__init__(
            key,
            base_url=f"{url}/auth/v1",
            headers=headers,
            timeout=timeout,
            transport=transport,
        )
        self._jwt_secret = jwt_secret or os.getenv("SUPABASE_JWT_SECRET")
        self._clock = clock
        self._current: AuthSessionData | None = None
        self._listeners: list[AuthListener] = []

    # ---- Session state ----

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: AuthSessionData | None) -> None:
        for listener in list(self._listeners):
            listener(event, session)

    async def get_session(self) -> AuthSessionData | None:
        """Current session, or None when signed out or the token has expired."""
        if self._current is not None and self._current.expired(self._clock()):
            self._current = None
        return self._current

    # ---- Credentials ----

    async def sign_in_with_password(self, email: str, password: str) -> AuthSessionData:
        """Exchange e-mail and password for a session."""
        response = await self._client.post(
            "/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        session = self._session_from(self._json_or_raise(response))
        self._current = session
        self._emit(AuthEvent.SIGNED_IN, session)
        return session

    async def sign_up(
        self,
        email: str,
        password: str,
        *,
        data: dict[str, Any] | None = None,
        redirect_to: str | None = None,
    ) -> SignUpResult:
        """Create an account. A session comes back only if confirmation is disabled."""
        params = {"redirect_to": redirect_to} if redirect_to else None
        response = await self._client.post(
            "/signup",
            params=params,
            json={"email": email, "password": password, "data": data or {}},
        )
        body = self._json_or_raise(response)
        if "access_token" in body:
            session = self._session_from(body)
            self._current = session
            self._emit(AuthEvent.SIGNED_IN, session)
            return SignUpResult(user=session.user, session=session)
        user = body.get("user") or body
        return SignUpResult(user=AuthUser.model_validate(user) if user.get("id") else None)

    async def sign_out(self) -> None:
        """Revoke the current session upstream and clear it locally.

        Local state is cleared even when the revoke call fails; the error is
        re-raised afterwards.
        """
        session, self._current = self._current, None
        try:
            if session is not None:
                response = await self._client.post(
                    "/logout",
                    headers={"Authorization": f"Bearer {session.access_token}"},
                )
                if response.status_code not in (401, 403, 404):
                    response.raise_for_status()
        finally:
            self._emit(AuthEvent.SIGNED_OUT, None)

    # ---- Token verification ----

    async def get_user(self, token: str) -> AuthUser:
        """Resolve a bearer token to its user through the auth API."""
        response = await self._client.get(
            "/user", headers={"Authorization": f"Bearer {token}"}
        )
        if response.status_code in (401, 403):
            raise IdentityError("Invalid or expired token", status_code=401)
        return AuthUser.model_validate(self._json_or_raise(response))

    async def get_claims(self, token: str) -> Claims:
        """Verify a bearer token and return its claims.

        Verified locally (HS256) when a JWT secret is configured, otherwise
        through get_user.
        """
        if not self._jwt_secret:
            user = await self.get_user(token)
            return Claims(sub=user.id, email=user.email)
        try:
            payload = jwt.decode(
                token,
                self._jwt_secret,
                algorithms=["HS256"],
                audience=self.JWT_AUDIENCE,
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as exc:
            logger.debug("Rejected bearer token: %s", exc)
            raise IdentityError("Invalid or expired token", status_code=401) from exc
        return Claims.model_validate(payload)

    # ---- Helpers ----

    def _json_or_raise(self, response: httpx.Response) -> dict[str, Any]:
        if response.status_code in (400, 401, 403, 422):
            raise IdentityError(_error_message(response), status_code=response.status_code)
        response.raise_for_status()
        return response.json()

    def _session_from(self, body: dict[str, Any]) -> AuthSessionData:
        if body.get("expires_at") is None and body.get("expires_in") is not None:
            body = {**body, "expires_at": self._clock() + float(body["expires_in"])}
        return AuthSessionData.model_validate(body)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Auth error [{response.status_code}]"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"Auth error [{response.status_code}]"
    )
