"""Security headers and rate limiting."""

from collections.abc import Callable

from fastapi import Request
from fastapi.responses import Response
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.middleware.base import BaseHTTPMiddleware

from olw.config.settings import get_settings


# In-memory, per-process rate limiter keyed by client address
limiter = Limiter(key_func=get_remote_address, enabled=get_settings().RATE_LIMIT_ENABLED)


class SimpleSecurityMiddleware(BaseHTTPMiddleware):
    """Stamp browser-hardening headers on every response."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Run the request, then add the headers."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        return response


# Rate limiting decorators (use on endpoints)
auth_rate_limit = limiter.limit("5/minute")  # Login / registration attempts
