"""
Snippetbox — Exception Recovery Middleware
============================================

What:  Outermost middleware. Converts any exception that nothing else
       handled into a plain-text 500.
How:   Wraps call_next() in try/except. The registered exception handlers
       (main.register_exception_handlers) deal with the known application
       errors first; whatever reaches this layer is unexpected.

The response carries `Connection: close`: after an unexpected failure the
server does not reuse the connection for another request.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)


class RecoverPanicMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "Unhandled error: %s (method=%s uri=%s)",
                str(exc),
                request.method,
                request.url.path,
                exc_info=True,
            )
            return PlainTextResponse(
                "Internal Server Error",
                status_code=500,
                headers={"Connection": "close"},
            )
