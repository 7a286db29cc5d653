"""
Snippetbox — Authentication Middleware
========================================

What:  Decides whether the request comes from a logged-in user and
       publishes it as request.state.is_authenticated.
How:   Reads "authenticated_user_id" from the session and confirms the
       account still exists (UserStore.exists). A session that outlived
       its account is treated as anonymous.
Who:   Innermost middleware. The route guard
       (dependencies.require_authentication) and the template data read
       the flag.

Responses of guarded routes are marked `Cache-Control: no-store` here,
once the guard has flagged them with request.state.no_store.
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from snippetbox.middleware import is_stateless_path

AUTHENTICATED_USER_KEY = "authenticated_user_id"


class AuthenticateMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if is_stateless_path(request.url.path):
            return await call_next(request)

        request.state.is_authenticated = False
        request.state.no_store = False

        user_id = request.state.session.get(AUTHENTICATED_USER_KEY)
        if user_id is not None:
            request.state.is_authenticated = await request.app.state.users.exists(user_id)

        response = await call_next(request)

        if request.state.no_store:
            response.headers["Cache-Control"] = "no-store"
        return response
