"""
Snippetbox — Security Headers Middleware
==========================================

What:  Adds the same set of hardening headers to every response, static
       files and error pages included.

Headers:
    Content-Security-Policy   settings.content_security_policy
    Referrer-Policy           origin-when-cross-origin
    X-Content-Type-Options    nosniff
    X-Frame-Options           deny
    X-XSS-Protection          0 (the legacy auditor is disabled; CSP covers it)
    Server                    settings.server_header (hides the server software)
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, content_security_policy: str, server_header: str):
        super().__init__(app)
        self.headers = {
            "Content-Security-Policy": content_security_policy,
            "Referrer-Policy": "origin-when-cross-origin",
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "deny",
            "X-XSS-Protection": "0",
            "Server": server_header,
        }

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers[name] = value
        return response
