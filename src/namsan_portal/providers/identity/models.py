"""Models for the identity provider (users, sessions, token claims)."""
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AuthEvent(str, Enum):
    """Auth state transitions broadcast to on_auth_state_change listeners."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"


class AuthUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = Field(default_factory=dict)


class AuthSessionData(BaseModel):
    """Access token, its expiry (unix seconds) and the signed-in user."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    token_type: str = "bearer"
    refresh_token: str | None = None
    expires_at: float | None = None
    user: AuthUser

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class Claims(BaseModel):
    """Verified bearer token claims; `sub` is the user id."""

    model_config = ConfigDict(extra="ignore")

    sub: str
    email: str | None = None
    role: str | None = None
    exp: float | None = None


class SignUpResult(BaseModel):
    """Sign-up returns a session only when e-mail confirmation is off."""

    user: AuthUser | None = None
    session: AuthSessionData | None = None
