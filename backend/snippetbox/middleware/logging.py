"""
Snippetbox — Request Logging Middleware
=========================================

What:  One access-log line per HTTP request.
How:   Measures the time spent below this middleware and logs it together
       with the request line and the response status.
Who:   Second middleware in the chain, just inside RecoverPanicMiddleware,
       so a recovered 500 is still logged with its status.

Log line:
    10.0.0.7 - HTTP/1.1 POST /snippet/create 303 12.4ms

What we log vs what we DON'T log:
    ✅ Log: client address, protocol, method, URI, status, duration
    ❌ Don't log: form bodies (passwords), cookies, session contents
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("snippetbox.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs structured information about each HTTP request and response.

    The level follows the status class: 5xx → ERROR, 4xx → WARNING,
    everything else → INFO. A 422 re-render is therefore a WARNING.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = request.client.host if request.client else "unknown"
        protocol = f"HTTP/{request.scope.get('http_version', '1.1')}"
        method = request.method
        uri = request.url.path
        if request.url.query:
            uri = f"{uri}?{request.url.query}"

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s - %s %s %s %d %.1fms",
            client_ip,
            protocol,
            method,
            uri,
            status,
            duration_ms,
            extra={
                "ip": client_ip,
                "proto": protocol,
                "method": method,
                "uri": uri,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )

        return response
