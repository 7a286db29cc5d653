"""
Snippetbox — User Route Handlers
==================================

What:  Signup, login and logout.

Session handling:
    Login and logout both renew the session token before changing the
    authenticated user id, so a token obtained before the change cannot be
    used after it.
    A successful login returns the user to the page that sent them to the
    login form (stored by require_authentication), or to their account.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from snippetbox.dependencies import (
    REDIRECT_AFTER_LOGIN_KEY,
    get_session,
    get_templates,
    get_users,
    require_authentication,
)
from snippetbox.exceptions import DuplicateEmailError, InvalidCredentialsError
from snippetbox.middleware.authenticate import AUTHENTICATED_USER_KEY
from snippetbox.render import TemplateCache
from snippetbox.routes.helpers import FLASH_KEY, decode_post_form, new_template_data
from snippetbox.schemas.forms import (
    UserLoginForm,
    UserSignupForm,
    validate_user_login,
    validate_user_signup,
)
from snippetbox.services.base import UserStore
from snippetbox.services.session_store import Session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["Users"])

DEFAULT_LANDING_PATH = "/account/view"


# ── Signup ────────────────────────────────────────────────────────────────

@router.get("/signup", response_class=HTMLResponse, summary="Signup form")
async def user_signup(
    request: Request,
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    data = new_template_data(request)
    data.form = UserSignupForm()
    return templates.render(200, "signup.html", data)


@router.post("/signup", summary="Create an account")
async def user_signup_post(
    request: Request,
    users: UserStore = Depends(get_users),
    templates: TemplateCache = Depends(get_templates),
    session: Session = Depends(get_session),
) -> Response:
    form = await decode_post_form(request, UserSignupForm)

    validator = validate_user_signup(form)
    if validator.valid:
        try:
            await users.insert(form.name, form.email, form.password)
        except DuplicateEmailError:
            validator.add_field_error("email", "Email address is already in use")

    if not validator.valid:
        data = new_template_data(request)
        data.form = form
        data.validator = validator
        return templates.render(422, "signup.html", data)

    session.put(FLASH_KEY, "Your signup was successful. Please log in.")
    return RedirectResponse("/user/login", status_code=303)


# ── Login ─────────────────────────────────────────────────────────────────

@router.get("/login", response_class=HTMLResponse, summary="Login form")
async def user_login(
    request: Request,
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    data = new_template_data(request)
    data.form = UserLoginForm()
    return templates.render(200, "login.html", data)


@router.post("/login", summary="Log in")
async def user_login_post(
    request: Request,
    users: UserStore = Depends(get_users),
    templates: TemplateCache = Depends(get_templates),
    session: Session = Depends(get_session),
) -> Response:
    form = await decode_post_form(request, UserLoginForm)

    validator = validate_user_login(form)
    user_id = None
    if validator.valid:
        try:
            user_id = await users.authenticate(form.email, form.password)
        except InvalidCredentialsError:
            validator.add_non_field_error("Email or password is incorrect")

    if not validator.valid:
        data = new_template_data(request)
        data.form = form
        data.validator = validator
        return templates.render(422, "login.html", data)

    session.renew_token()
    session.put(AUTHENTICATED_USER_KEY, user_id)
    logger.info("User %d logged in", user_id)

    redirect_path = session.pop(REDIRECT_AFTER_LOGIN_KEY) or DEFAULT_LANDING_PATH
    return RedirectResponse(redirect_path, status_code=303)


# ── Logout ────────────────────────────────────────────────────────────────

@router.post(
    "/logout",
    dependencies=[Depends(require_authentication)],
    summary="Log out",
)
async def user_logout_post(session: Session = Depends(get_session)) -> Response:
    session.renew_token()
    session.remove(AUTHENTICATED_USER_KEY)
    session.put(FLASH_KEY, "You've been logged out successfully")
    return RedirectResponse("/", status_code=303)
