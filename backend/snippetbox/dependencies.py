"""
Snippetbox — FastAPI Dependencies
===================================

What:  Accessors for the per-application objects kept on `app.state`, the
       per-request session, and the require-authentication route guard.
How:   Handlers declare `Depends(get_snippets)` and so on instead of
       importing module-level singletons, so a test app built with
       in-memory stores is used end to end.
"""

from fastapi import Depends, Request

from snippetbox.config import Settings
from snippetbox.exceptions import AuthenticationRequiredError
from snippetbox.render import TemplateCache
from snippetbox.services.base import SnippetStore, UserStore
from snippetbox.services.session_store import Session

REDIRECT_AFTER_LOGIN_KEY = "redirect_path_after_login"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_snippets(request: Request) -> SnippetStore:
    return request.app.state.snippets


def get_users(request: Request) -> UserStore:
    return request.app.state.users


def get_templates(request: Request) -> TemplateCache:
    return request.app.state.templates


def get_session(request: Request) -> Session:
    """The session SessionMiddleware attached to this request."""
    return request.state.session


async def require_authentication(
    request: Request,
    session: Session = Depends(get_session),
) -> None:
    """
    Route guard for pages that need a logged-in user.

    Anonymous requests are redirected to the login page by the
    AuthenticationRequiredError handler. A GET or HEAD path is remembered
    so login can send the user back there; a POST-only path such as
    /user/logout cannot be followed by the browser's redirect, so it is not.
    Authenticated responses are flagged so AuthenticateMiddleware marks
    them `Cache-Control: no-store`.
    """
    if not request.state.is_authenticated:
        if request.method in ("GET", "HEAD"):
            session.put(REDIRECT_AFTER_LOGIN_KEY, request.url.path)
        raise AuthenticationRequiredError(path=request.url.path)

    request.state.no_store = True
