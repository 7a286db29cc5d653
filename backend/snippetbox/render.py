"""
Snippetbox — Template Cache and Renderer
==========================================

What:  Parses every page template once at startup and renders pages into
       complete HTML responses.
How:   Jinja2 environment over `ui/html`:
           base.html            layout every page extends
           partials/*.html      fragments included by the layout
           pages/*.html         one file per page, the cache key
       `render()` produces the whole body as a string before building the
       response, so a template error can never follow an already-sent 200.
Who:   Built by create_app() (stored on `app.state.templates`); used by
       every display/submit handler through the get_templates dependency.

A page name missing from the cache is a deployment defect, not a user
error: it raises TemplateNotFoundError, which is logged and answered with
a 500.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, select_autoescape
from starlette.responses import HTMLResponse

from snippetbox.exceptions import TemplateNotFoundError
from snippetbox.schemas.snippet import SnippetRecord
from snippetbox.schemas.user import UserRecord
from snippetbox.validator import Validator

logger = logging.getLogger(__name__)


def human_date(value: Optional[datetime]) -> str:
    """'02 Jan 2024 at 15:04' (UTC), or '' for a missing timestamp."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%d %b %Y at %H:%M")


@dataclass
class TemplateData:
    """
    The per-request envelope every page template receives.

    Handlers start from routes/helpers.new_template_data() (which fills the
    year, flash, CSRF token and authentication flag) and set the
    page-specific fields.
    """

    current_year: int
    csrf_token: str = ""
    flash: str = ""
    is_authenticated: bool = False
    snippet: Optional[SnippetRecord] = None
    snippets: List[SnippetRecord] = field(default_factory=list)
    user: Optional[UserRecord] = None
    form: Any = None
    validator: Validator = field(default_factory=Validator)

    def as_context(self) -> Dict[str, Any]:
        # Records and the validator go to the template as objects, not dicts
        return {f.name: getattr(self, f.name) for f in fields(self)}


class TemplateCache:
    """
    Page name → parsed Jinja2 template.

    Read-only once built; safe to share between concurrent requests.
    """

    def __init__(self, pages: Dict[str, Template]):
        self._pages = pages

    @property
    def pages(self) -> List[str]:
        return sorted(self._pages)

    def render(self, status: int, page: str, data: TemplateData) -> HTMLResponse:
        template = self._pages.get(page)
        if template is None:
            raise TemplateNotFoundError(page)

        body = template.render(**data.as_context())
        return HTMLResponse(content=body, status_code=status)


def new_template_cache(template_dir: str) -> TemplateCache:
    """
    Scan `template_dir/pages` and pre-parse every page (and the layout and
    partials it depends on).

    Raises:
        jinja2.TemplateError: A template has a syntax error. Startup fails.
        FileNotFoundError: The template directory is missing.
    """
    root = Path(template_dir)
    pages_dir = root / "pages"
    if not pages_dir.is_dir():
        raise FileNotFoundError(f"template directory not found: {pages_dir}")

    env = Environment(
        loader=FileSystemLoader(str(root)),
        autoescape=select_autoescape(["html"]),
        undefined=StrictUndefined,
        auto_reload=False,
    )
    env.filters["human_date"] = human_date

    # Layout and partials are parsed up front so syntax errors surface at startup
    env.get_template("base.html")
    for partial in sorted((root / "partials").glob("*.html")):
        env.get_template(f"partials/{partial.name}")

    pages: Dict[str, Template] = {}
    for page in sorted(pages_dir.glob("*.html")):
        pages[page.name] = env.get_template(f"pages/{page.name}")

    logger.info("Template cache built: %d pages", len(pages))
    return TemplateCache(pages)
