"""
Snippetbox — Session Middleware
=================================

What:  Loads the server-side session for the request's cookie token before
       the route runs and saves it afterwards.
How:   request.state.session holds the services.session_store.Session.
       After the response is produced, a modified session is committed and
       the cookie is (re)issued with the remaining lifetime as Max-Age.
Who:   Fourth middleware; CSRFMiddleware, AuthenticateMiddleware, the route
       guard and every handler read request.state.session.

Cookie attributes:
    HttpOnly      not readable from page scripts
    Secure        settings.session_cookie_secure (default on)
    SameSite=Lax  not sent on cross-site POSTs
    Path=/        whole site
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from snippetbox.middleware import is_stateless_path
from snippetbox.services.session_store import SessionManager, SessionStatus

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        manager: SessionManager,
        cookie_name: str = "session",
        secure: bool = True,
    ):
        super().__init__(app)
        self.manager = manager
        self.cookie_name = cookie_name
        self.secure = secure

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if is_stateless_path(request.url.path):
            return await call_next(request)

        session = await self.manager.load(request.cookies.get(self.cookie_name))
        request.state.session = session

        response = await call_next(request)

        if session.status is SessionStatus.MODIFIED:
            await self.manager.save(session)
            response.set_cookie(
                key=self.cookie_name,
                value=session.token,
                max_age=self.manager.seconds_left(session),
                path="/",
                secure=self.secure,
                httponly=True,
                samesite="lax",
            )

        response.headers.add_vary_header("Cookie")
        return response
