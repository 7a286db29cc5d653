"""
Snippetbox — Public Pages
===========================

What:  GET / (latest snippets) and GET /about.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from snippetbox.config import Settings
from snippetbox.dependencies import get_settings, get_snippets, get_templates
from snippetbox.render import TemplateCache
from snippetbox.routes.helpers import new_template_data
from snippetbox.services.base import SnippetStore

router = APIRouter(tags=["Pages"])


@router.get("/", response_class=HTMLResponse, summary="Latest snippets")
async def home(
    request: Request,
    snippets: SnippetStore = Depends(get_snippets),
    templates: TemplateCache = Depends(get_templates),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    latest = await snippets.latest(settings.snippets_latest_limit)

    data = new_template_data(request)
    data.snippets = latest
    return templates.render(200, "home.html", data)


@router.get("/about", response_class=HTMLResponse, summary="About page")
async def about(
    request: Request,
    templates: TemplateCache = Depends(get_templates),
) -> HTMLResponse:
    return templates.render(200, "about.html", new_template_data(request))
