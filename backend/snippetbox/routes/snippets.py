"""
Snippetbox — Snippet Route Handlers
=====================================

What:  GET /snippet/view/{id}, GET/POST /snippet/create.
How:   Viewing is public; creating goes through require_authentication.

Snippet ids:
    The path segment is taken as a plain string and parsed here, so that
    "abc", "-1", "0" and "1.5" are all answered with the same 404 as an id
    that does not exist or has expired.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.responses import Response

from snippetbox.dependencies import (
    get_session,
    get_snippets,
    get_templates,
    require_authentication,
)
from snippetbox.exceptions import NotFoundError
from snippetbox.render import TemplateCache
from snippetbox.routes.helpers import FLASH_KEY, decode_post_form, new_template_data
from snippetbox.schemas.forms import (
    DEFAULT_EXPIRY_DAYS,
    SnippetCreateForm,
    validate_snippet_create,
)
from snippetbox.services.base import SnippetStore
from snippetbox.services.session_store import Session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Snippets"])
protected = APIRouter(tags=["Snippets"], dependencies=[Depends(require_authentication)])


def parse_snippet_id(raw: str) -> int:
    """Positive decimal integer, or NotFoundError."""
    if not (raw.isascii() and raw.isdigit()):
        raise NotFoundError(resource="snippet", context={"raw_id": raw})
    snippet_id = int(raw)
    if snippet_id < 1:
        raise NotFoundError(resource="snippet", resource_id=snippet_id)
    return snippet_id


@router.get("/snippet/view/{snippet_id}", response_class=HTMLResponse, summary="View a snippet")
async def snippet_view(
    snippet_id: str,
    request: Request,
    snippets: SnippetStore = Depends(get_snippets),
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    snippet = await snippets.get(parse_snippet_id(snippet_id))

    data = new_template_data(request)
    data.snippet = snippet
    return templates.render(200, "view.html", data)


@protected.get("/snippet/create", response_class=HTMLResponse, summary="Snippet form")
async def snippet_create(
    request: Request,
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    data = new_template_data(request)
    data.form = SnippetCreateForm(expires=DEFAULT_EXPIRY_DAYS)
    return templates.render(200, "create.html", data)


@protected.post("/snippet/create", summary="Create a snippet")
async def snippet_create_post(
    request: Request,
    snippets: SnippetStore = Depends(get_snippets),
    templates: TemplateCache = Depends(get_templates),
    session: Session = Depends(get_session),
) -> Response:
    form = await decode_post_form(request, SnippetCreateForm)

    validator = validate_snippet_create(form)
    if not validator.valid:
        data = new_template_data(request)
        data.form = form
        data.validator = validator
        return templates.render(422, "create.html", data)

    snippet_id = await snippets.insert(form.title, form.content, form.expires)

    session.put(FLASH_KEY, "Snippet successfully created")
    return RedirectResponse(f"/snippet/view/{snippet_id}", status_code=303)
