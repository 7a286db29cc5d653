"""
Snippetbox — Custom Exception Hierarchy
=========================================

What:  Application-specific exceptions for the different failure classes.
How:   Each exception carries a message and an optional context dict.
       Stores raise them; handlers convert domain errors into form errors;
       global exception handlers (registered in main.py) turn the rest into
       plain-text HTTP responses.

Exception Hierarchy:
    SnippetboxError (base)
    ├── NotFoundError                → 404 Not Found
    ├── InvalidCredentialsError      → 422 (as a form error, never raw)
    ├── DuplicateEmailError          → 422 (as a form error, never raw)
    ├── BadRequestError              → 400 Bad Request
    ├── AuthenticationRequiredError  → 303 redirect to the login page
    ├── DatabaseError                → 500 Internal Server Error
    └── ConfigurationError           → 500 Internal Server Error
        └── TemplateNotFoundError

Security Note:
    `context` is for the server log only. Responses never include it.
"""

from typing import Any, Dict, Optional


class SnippetboxError(Exception):
    """
    Base exception for all Snippetbox application errors.

    Attributes:
        message:  Human-readable description
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(SnippetboxError):
    """
    Raised when a requested record does not exist.

    Expired snippets raise this too: a client cannot tell a snippet that
    never existed from one that has expired.
    """

    def __init__(
        self,
        resource: str = "record",
        resource_id: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"no matching {resource} found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id is not None:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InvalidCredentialsError(SnippetboxError):
    """
    Raised when an email/password pair does not match a stored user.

    Deliberately the same error for "unknown email" and "wrong password".
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="invalid credentials", context=context)


class DuplicateEmailError(SnippetboxError):
    """Raised when a signup hits the unique constraint on users.email."""

    def __init__(self, email: str = "", context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if email:
            ctx["email"] = email
        super().__init__(message="duplicate email", context=ctx)


class BadRequestError(SnippetboxError):
    """
    Raised when the client sent something the server cannot use as-is.

    When:  Undecodable form body, CSRF token missing or mismatched.
    HTTP:  400 Bad Request (no retry semantics, client must resubmit)
    """

    def __init__(
        self,
        message: str = "Bad Request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthenticationRequiredError(SnippetboxError):
    """
    Raised by the require-authentication route guard.

    The exception handler answers with 303 See Other to the login page.
    The requested path has already been stored in the session by the guard.
    """

    def __init__(self, path: str = "/"):
        super().__init__(message="authentication required", context={"path": path})
        self.path = path


class DatabaseError(SnippetboxError):
    """
    Raised when a database operation fails unexpectedly.

    The client only ever sees a generic 500; the original exception type and
    query context are logged server-side.
    """

    def __init__(
        self,
        message: str = "A database error occurred.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(SnippetboxError):
    """Raised for deployment defects (missing templates, bad wiring)."""


class TemplateNotFoundError(ConfigurationError):
    """Raised when a handler asks for a page that is not in the template cache."""

    def __init__(self, page: str):
        super().__init__(
            message=f"the template {page} does not exist",
            context={"page": page},
        )
        self.page = page
