# Middleware package init
"""
Snippetbox — Middleware Package
=================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outer → inner):
    Request → [Recover] → [Access log] → [Security headers]
            → [Session] → [CSRF] → [Authenticate] → Route (+ require_authentication)

    Ordering rules:
    1. Recover FIRST: an exception raised anywhere below, middleware
       included, becomes a logged 500 instead of escaping the app.
    2. Session before CSRF and Authenticate: both read session state.
    3. Authenticate before the route guard: the guard in
       dependencies.require_authentication reads the flag it sets.

    Starlette runs middleware in REVERSE order of add_middleware(), so
    create_app() registers them inner-first.

Static assets and the liveness probe only go through the first three
(EXCLUDED_PATHS and EXCLUDED_PREFIXES below): they need no session,
no CSRF token and no user.
"""

# Requests for these bypass session, CSRF and authentication handling
EXCLUDED_PATHS = {"/ping"}
EXCLUDED_PREFIXES = ("/static/",)


def is_stateless_path(path: str) -> bool:
    return path in EXCLUDED_PATHS or path.startswith(EXCLUDED_PREFIXES)
