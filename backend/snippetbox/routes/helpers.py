"""
Snippetbox — Handler Helpers
==============================

What:  The steps every HTML handler shares.
       - decode_post_form(): form body → pydantic form model (400 on failure)
       - new_template_data(): the envelope every page is rendered with
"""

import logging
from typing import Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from snippetbox.exceptions import BadRequestError
from snippetbox.render import TemplateData
from snippetbox.services.base import utc_now

logger = logging.getLogger(__name__)

FormT = TypeVar("FormT", bound=BaseModel)

FLASH_KEY = "flash"


async def decode_post_form(request: Request, form_model: Type[FormT]) -> FormT:
    """
    Bind the submitted form fields to `form_model`.

    Missing fields take the model's defaults; file parts are ignored.

    Raises:
        BadRequestError: The body is not a form, or a field cannot be
            converted (e.g. expires="abc").
    """
    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        raise BadRequestError(context={"reason": str(e)}) from e

    fields = {key: value for key, value in form.items() if isinstance(value, str)}
    try:
        return form_model.model_validate(fields)
    except ValidationError as e:
        logger.warning(
            "Form %s rejected: %d invalid field(s)", form_model.__name__, e.error_count()
        )
        raise BadRequestError(context={"form": form_model.__name__}) from e


def new_template_data(request: Request) -> TemplateData:
    """Template data with the year, flash, CSRF token and auth flag filled in."""
    session = request.state.session
    return TemplateData(
        current_year=utc_now().year,
        flash=session.pop(FLASH_KEY, ""),
        is_authenticated=request.state.is_authenticated,
        csrf_token=request.state.csrf_token,
    )
