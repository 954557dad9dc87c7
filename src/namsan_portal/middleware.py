"""CORS and last-resort error handling at the relay boundary."""
import logging

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import (BaseHTTPMiddleware,
                                       RequestResponseEndpoint)

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, "
        "x-supabase-client-platform, x-supabase-client-platform-version, "
        "x-supabase-client-runtime, x-supabase-client-runtime-version"
    ),
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


def error_body(request: Request, message: str) -> dict:
    """`{error}` or, on routers that opted in, `{success: false, error}`."""
    if getattr(request.state, "error_envelope", False):
        return {"success": False, "error": message}
    return {"error": message}


class RelayBoundaryMiddleware(BaseHTTPMiddleware):
    """Answers preflight requests and puts CORS headers on every response.

    Anything the exception handlers did not turn into a response becomes a
    500 here, so no request goes unanswered.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
            response = JSONResponse(error_body(request, "Internal server error"), status_code=500)
        response.headers.update(CORS_HEADERS)
        return response
