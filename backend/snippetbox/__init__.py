"""
Snippetbox — Application Package Initializer
==============================================

What: Marks the `snippetbox` directory as a Python package.
Who:  Used by uvicorn (`snippetbox.main:app`), Alembic and pytest.

Architecture Note:
    The application follows a layered layout:

    ┌─────────────────────────────────────┐
    │   Middleware (sessions, CSRF, auth) │  ← cross-cutting request filters
    ├─────────────────────────────────────┤
    │      Routes (HTML handlers)         │  ← decode → validate → store → render
    ├─────────────────────────────────────┤
    │  Services (snippet/user/session     │  ← storage capability interfaces
    │  stores, SQL + in-memory)           │
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + pydantic records/forms
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← async SQLAlchemy engine
    └─────────────────────────────────────┘

    Handlers never touch the ORM directly; they talk to the store
    interfaces held on `app.state`, which tests swap for in-memory doubles.
"""

__version__ = "1.0.0"
