"""
Snippetbox — Account Route Handlers
=====================================

What:  GET /account/view and GET/POST /account/password/update.
       Every route here requires an authenticated user.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from snippetbox.dependencies import (
    get_session,
    get_templates,
    get_users,
    require_authentication,
)
from snippetbox.exceptions import InvalidCredentialsError, NotFoundError
from snippetbox.middleware.authenticate import AUTHENTICATED_USER_KEY
from snippetbox.render import TemplateCache
from snippetbox.routes.helpers import FLASH_KEY, decode_post_form, new_template_data
from snippetbox.schemas.forms import (
    AccountPasswordUpdateForm,
    validate_account_password_update,
)
from snippetbox.services.base import UserStore
from snippetbox.services.session_store import Session

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/account",
    tags=["Account"],
    dependencies=[Depends(require_authentication)],
)


@router.get("/view", summary="Account details")
async def account_view(
    request: Request,
    users: UserStore = Depends(get_users),
    templates: TemplateCache = Depends(get_templates),
    session: Session = Depends(get_session),
) -> Response:
    try:
        user = await users.get(session.get(AUTHENTICATED_USER_KEY))
    except NotFoundError:
        return RedirectResponse("/user/login", status_code=303)

    data = new_template_data(request)
    data.user = user
    return templates.render(200, "account.html", data)


@router.get("/password/update", response_class=HTMLResponse, summary="Password form")
async def account_password_update(
    request: Request,
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    data = new_template_data(request)
    data.form = AccountPasswordUpdateForm()
    return templates.render(200, "password.html", data)


@router.post("/password/update", summary="Change password")
async def account_password_update_post(
    request: Request,
    users: UserStore = Depends(get_users),
    templates: TemplateCache = Depends(get_templates),
    session: Session = Depends(get_session),
) -> Response:
    form = await decode_post_form(request, AccountPasswordUpdateForm)

    validator = validate_account_password_update(form)
    if validator.valid:
        try:
            await users.password_update(
                session.get(AUTHENTICATED_USER_KEY),
                form.current_password,
                form.new_password,
            )
        except InvalidCredentialsError:
            validator.add_field_error("current_password", "Current password is incorrect")

    if not validator.valid:
        data = new_template_data(request)
        data.form = form
        data.validator = validator
        return templates.render(422, "password.html", data)

    session.put(FLASH_KEY, "Password updated successfully")
    return RedirectResponse("/account/view", status_code=303)
