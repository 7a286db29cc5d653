"""
Snippetbox — CSRF Protection Middleware
=========================================

What:  Rejects state-changing requests that do not echo the session's CSRF
       token in a `csrf_token` form field.
How:   Every session gets a random token (stored under "csrf_token") the
       first time it passes through here. Pages render it into a hidden
       input; POST, PUT, PATCH and DELETE must send it back. The comparison
       is constant-time.
Who:   Runs inside SessionMiddleware. Handlers read the current token from
       request.state.csrf_token when building template data.

Failure modes (all → 400 Bad Request, plain text):
    - No token in the session (e.g. expired session, forged request)
    - Field missing or different from the session token
    - Body that cannot be parsed as a form

Form bodies are read with request.body() first so that Starlette replays
the same bytes to the route handler, which decodes the form again.
"""

import logging
import secrets

from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from snippetbox.middleware import is_stateless_path

logger = logging.getLogger(__name__)

CSRF_SESSION_KEY = "csrf_token"
CSRF_FORM_FIELD = "csrf_token"
UNSAFE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


class CSRFMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if is_stateless_path(request.url.path):
            return await call_next(request)

        session = request.state.session
        expected = session.get(CSRF_SESSION_KEY)

        if request.method in UNSAFE_METHODS:
            submitted = await self._submitted_token(request)
            if (
                not expected
                or not submitted
                or not secrets.compare_digest(submitted.encode(), expected.encode())
            ):
                logger.warning(
                    "CSRF check failed: %s %s", request.method, request.url.path
                )
                return PlainTextResponse("Bad Request", status_code=400)

        if not expected:
            expected = generate_csrf_token()
            session.put(CSRF_SESSION_KEY, expected)

        request.state.csrf_token = expected
        return await call_next(request)

    async def _submitted_token(self, request: Request) -> str:
        await request.body()
        try:
            form = await request.form()
        except (HTTPException, MultiPartException) as e:
            logger.warning("Undecodable form body: %s", str(e))
            return ""
        value = form.get(CSRF_FORM_FIELD)
        return value if isinstance(value, str) else ""
