"""
HTTPS Enforcement Middleware - Redirect HTTP to HTTPS in production.

Behavior:
- Development: Allow HTTP (localhost doesn't have SSL)
- Production: Redirect HTTP → HTTPS

The hosting platform's router terminates TLS and forwards plain HTTP with an
X-Forwarded-Proto header, so that header wins over the request scheme.

Usage:
    from app.middleware.https_enforcement import HTTPSEnforcementMiddleware

    if settings.environment == "production":
        app.add_middleware(HTTPSEnforcementMiddleware)
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class HTTPSEnforcementMiddleware(BaseHTTPMiddleware):
    """Redirect requests that did not arrive over HTTPS."""

    def __init__(self, app, redirect_status_code: int = 308):
        """
        Args:
            app: ASGI application
            redirect_status_code: HTTP status for redirect (308 preserves the method)
        """
        super().__init__(app)
        self.redirect_status_code = redirect_status_code

    async def dispatch(self, request, call_next):
        forwarded_proto = request.headers.get("X-Forwarded-Proto", "").lower()

        if forwarded_proto:
            is_https = forwarded_proto == "https"
        else:
            is_https = request.url.scheme == "https"

        if not is_https:
            https_url = request.url.replace(scheme="https")

            logger.info(
                "HTTP request redirected to HTTPS",
                original_url=str(request.url),
                https_url=str(https_url),
                forwarded_proto=forwarded_proto,
            )

            return RedirectResponse(
                url=str(https_url),
                status_code=self.redirect_status_code,
            )

        return await call_next(request)
