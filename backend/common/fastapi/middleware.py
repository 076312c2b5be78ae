"""
HTTP middleware shared by the gateway and the domain services.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

# Same header set the `helmet` defaults produce
DEFAULT_SECURITY_HEADERS: dict[str, str] = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

LEAKY_HEADERS = ("server", "x-powered-by")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add the standard security headers to every response.

    Also strips headers that advertise the server implementation, including
    ones relayed from an upstream service through the gateway.
    """

    def __init__(self, app: ASGIApp, headers: dict[str, str] | None = None) -> None:
        super().__init__(app)
        self.headers = dict(DEFAULT_SECURITY_HEADERS if headers is None else headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers[name] = value
        for name in LEAKY_HEADERS:
            if name in response.headers:
                del response.headers[name]
        return response
