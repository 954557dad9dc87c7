"""Main module for the Namsan portal relay service."""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from namsan_portal.config import Settings, get_settings
from namsan_portal.db import DataStore
from namsan_portal.db.sessions import create_db_engine, init_db
from namsan_portal.errors import RelayError
from namsan_portal.middleware import RelayBoundaryMiddleware, error_body
from namsan_portal.providers import (AIGatewayProvider, IdentityProvider,
                                     PerplexityProvider, ResendProvider,
                                     YFinanceProvider)
from namsan_portal.routers import (chat_router, market_router, news_router,
                                   newsletter_router, popups_router)
from namsan_portal.services import (AdminNotifier, ChatService,
                                    FixedWindowRateLimiter,
                                    MarketIndicesService, MarketNewsService,
                                    NewsletterService, PopupGate,
                                    StockNewsService, StockPricesService)

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def wire_services(
    fastapi_app: FastAPI,
    settings: Settings,
    *,
    store: DataStore,
    identity: IdentityProvider,
    ai_gateway: AIGatewayProvider,
    perplexity: PerplexityProvider,
    mailer: ResendProvider,
    quotes: YFinanceProvider,
    limiter: FixedWindowRateLimiter,
) -> None:
    """Build services around the given providers and attach them to app.state."""
    notifier = AdminNotifier(
        mailer,
        sender=settings.notification_sender,
        admin_email=settings.admin_email,
        portal_url=settings.portal_url,
    )
    state = fastapi_app.state
    state.settings = settings
    state.store = store
    state.identity = identity
    state.rate_limiter = limiter
    state.chat_service = ChatService(
        ai_gateway,
        limiter,
        max_requests=settings.chat_rate_limit,
        window_seconds=settings.chat_rate_window_seconds,
    )
    state.market_news_service = MarketNewsService(perplexity)
    state.stock_news_service = StockNewsService(perplexity, store)
    state.newsletter_service = NewsletterService(
        mailer,
        store,
        sender=settings.newsletter_sender,
        batch_size=settings.newsletter_batch_size,
    )
    state.admin_notifier = notifier
    state.market_indices_service = MarketIndicesService(quotes, store, notifier=notifier)
    state.stock_prices_service = StockPricesService(quotes)
    state.popup_gate = PopupGate(store)

    # Keep provider refs for clean shutdown
    state.providers_to_close = [identity, ai_gateway, perplexity, mailer, quotes]


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    """Create providers and services at startup; close providers on shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)

    engine = create_db_engine(settings.database_url, echo=settings.sql_echo)
    init_db(engine)
    timeout = settings.upstream_timeout_seconds

    limiter = FixedWindowRateLimiter()
    limiter.start_sweeper(settings.rate_limit_sweep_seconds)
    wire_services(
        fastapi_app,
        settings,
        store=DataStore(engine),
        identity=IdentityProvider(
            settings.supabase_url,
            settings.supabase_anon_key,
            jwt_secret=settings.supabase_jwt_secret,
            timeout=timeout,
        ),
        ai_gateway=AIGatewayProvider(
            settings.ai_gateway_api_key,
            base_url=settings.ai_gateway_url,
            model=settings.ai_model,
            timeout=timeout,
        ),
        perplexity=PerplexityProvider(
            settings.perplexity_api_key, model=settings.perplexity_model, timeout=timeout
        ),
        mailer=ResendProvider(settings.resend_api_key, timeout=timeout),
        quotes=YFinanceProvider(),
        limiter=limiter,
    )

    yield

    await limiter.stop()
    # Close provider resources (e.g. httpx clients)
    for provider in fastapi_app.state.providers_to_close:
        try:
            await provider.close()
        except Exception as exc:  # pylint: disable=broad-except
            logger.warning("Error closing provider %s: %s", type(provider).__name__, exc)
    engine.dispose()


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    return JSONResponse(error_body(request, exc.message), status_code=exc.status_code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(error_body(request, "Invalid request body"), status_code=400)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        error_body(request, str(exc.detail)),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


def create_app(lifespan_handler=lifespan) -> FastAPI:
    """Build the FastAPI app. Tests pass lifespan_handler=None and call wire_services."""
    fastapi_app = FastAPI(
        title="Namsan Portal Relays",
        description="Authenticated relays to AI, news and e-mail providers for the client portal",
        version="0.1.0",
        lifespan=lifespan_handler,
    )
    fastapi_app.add_middleware(RelayBoundaryMiddleware)
    fastapi_app.add_exception_handler(RelayError, relay_error_handler)
    fastapi_app.add_exception_handler(RequestValidationError, validation_error_handler)
    fastapi_app.add_exception_handler(StarletteHTTPException, http_error_handler)

    fastapi_app.include_router(chat_router)
    fastapi_app.include_router(news_router)
    fastapi_app.include_router(newsletter_router)
    fastapi_app.include_router(market_router)
    fastapi_app.include_router(popups_router)

    @fastapi_app.get("/")
    def health():
        """Return health check status."""
        return {"status": "ok"}

    return fastapi_app


app = create_app()


def run():
    """Run the server (uvicorn). Entry point for `start`."""
    uvicorn.run("namsan_portal.main:app", host="127.0.0.1", port=8001)
