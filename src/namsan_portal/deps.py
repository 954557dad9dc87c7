"""FastAPI dependency injection: app.state holds singletons; Depends() resolves them.

No external DI container. Lifespan (main.py) creates providers and services once
and attaches them to app.state; these getters are used by Depends(). The auth
dependencies validate the caller's bearer token against the identity provider.
"""
import logging
from typing import Annotated

import httpx
from fastapi import Depends, Header, Request

from namsan_portal.config import Settings
from namsan_portal.errors import Unauthorized
from namsan_portal.providers import (AuthUser, Claims, IdentityError,
                                     IdentityProvider)
from namsan_portal.services import (AdminNotifier, ChatService,
                                    MarketIndicesService, MarketNewsService,
                                    NewsletterService, PopupGate,
                                    StockNewsService, StockPricesService)

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_identity(request: Request) -> IdentityProvider:
    return request.app.state.identity


def get_chat_service(request: Request) -> ChatService:
    """Resolve ChatService (shares the process-wide rate limiter)."""
    return request.app.state.chat_service


def get_market_news_service(request: Request) -> MarketNewsService:
    return request.app.state.market_news_service


def get_stock_news_service(request: Request) -> StockNewsService:
    return request.app.state.stock_news_service


def get_newsletter_service(request: Request) -> NewsletterService:
    return request.app.state.newsletter_service


def get_admin_notifier(request: Request) -> AdminNotifier:
    return request.app.state.admin_notifier


def get_market_indices_service(request: Request) -> MarketIndicesService:
    return request.app.state.market_indices_service


def get_stock_prices_service(request: Request) -> StockPricesService:
    return request.app.state.stock_prices_service


def get_popup_gate(request: Request) -> PopupGate:
    return request.app.state.popup_gate


def use_success_envelope(request: Request) -> None:
    """Router dependency: render errors as `{success: false, error}`."""
    request.state.error_envelope = True


def require_authorization_header(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    """Presence check only; the header is not validated."""
    if not authorization:
        raise Unauthorized("Authorization required")
    return authorization


def get_bearer_token(
    authorization: Annotated[str | None, Header()] = None,
) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise Unauthorized("Missing authorization")
    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise Unauthorized("Missing authorization")
    return token


async def get_claims(
    token: Annotated[str, Depends(get_bearer_token)],
    identity: Annotated[IdentityProvider, Depends(get_identity)],
) -> Claims:
    """Verified claims of the caller; 401 on any verification failure."""
    try:
        return await identity.get_claims(token)
    except IdentityError as e:
        raise Unauthorized() from e
    except httpx.HTTPError as e:
        logger.warning("Token verification request failed: %s", e)
        raise Unauthorized() from e


async def get_current_user(
    token: Annotated[str, Depends(get_bearer_token)],
    identity: Annotated[IdentityProvider, Depends(get_identity)],
) -> AuthUser:
    """Caller's user record from the identity provider; 401 when the token is rejected."""
    try:
        return await identity.get_user(token)
    except IdentityError as e:
        raise Unauthorized() from e
    except httpx.HTTPError as e:
        logger.warning("User lookup request failed: %s", e)
        raise Unauthorized() from e


# Type aliases for route injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
ChatServiceDep = Annotated[ChatService, Depends(get_chat_service)]
MarketNewsServiceDep = Annotated[MarketNewsService, Depends(get_market_news_service)]
StockNewsServiceDep = Annotated[StockNewsService, Depends(get_stock_news_service)]
NewsletterServiceDep = Annotated[NewsletterService, Depends(get_newsletter_service)]
AdminNotifierDep = Annotated[AdminNotifier, Depends(get_admin_notifier)]
MarketIndicesServiceDep = Annotated[MarketIndicesService, Depends(get_market_indices_service)]
StockPricesServiceDep = Annotated[StockPricesService, Depends(get_stock_prices_service)]
PopupGateDep = Annotated[PopupGate, Depends(get_popup_gate)]
AuthorizationHeader = Annotated[str, Depends(require_authorization_header)]
VerifiedClaims = Annotated[Claims, Depends(get_claims)]
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
