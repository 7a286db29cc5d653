"""
Snippetbox — Template Cache Tests
===================================

What we test:
    ✅ Every page template parses and is cached at startup
    ✅ Unknown pages raise TemplateNotFoundError
    ✅ Output is autoescaped
    ✅ human_date formatting
"""

from datetime import datetime, timedelta, timezone

import pytest

from snippetbox.config import Settings
from snippetbox.exceptions import ConfigurationError, TemplateNotFoundError
from snippetbox.render import TemplateData, human_date, new_template_cache
from snippetbox.schemas.snippet import SnippetRecord

PAGES = [
    "about.html",
    "account.html",
    "create.html",
    "home.html",
    "login.html",
    "password.html",
    "signup.html",
    "view.html",
]


@pytest.fixture(scope="module")
def templates():
    return new_template_cache(Settings().template_dir)


class TestTemplateCache:
    def test_all_pages_cached(self, templates):
        assert templates.pages == PAGES

    def test_unknown_page(self, templates):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            templates.render(200, "missing.html", TemplateData(current_year=2024))
        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.page == "missing.html"

    def test_render_sets_status(self, templates):
        response = templates.render(422, "about.html", TemplateData(current_year=2024))
        assert response.status_code == 422
        assert response.headers["content-type"].startswith("text/html")
        assert b"2024" in response.body

    def test_output_is_escaped(self, templates):
        created = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        snippet = SnippetRecord(
            id=1,
            title="<script>alert(1)</script>",
            content="x",
            created=created,
            expires=created + timedelta(days=7),
        )
        response = templates.render(
            200, "view.html", TemplateData(current_year=2024, snippet=snippet)
        )
        assert b"<script>alert(1)</script>" not in response.body
        assert b"&lt;script&gt;" in response.body
        assert b"15 Jan 2024 at 12:00" in response.body

    def test_missing_template_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            new_template_cache(str(tmp_path))


class TestHumanDate:
    def test_format(self):
        assert human_date(datetime(2024, 3, 17, 10, 15, tzinfo=timezone.utc)) == "17 Mar 2024 at 10:15"

    def test_none(self):
        assert human_date(None) == ""

    def test_converts_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        assert human_date(datetime(2024, 3, 17, 12, 15, tzinfo=plus_two)) == "17 Mar 2024 at 10:15"
