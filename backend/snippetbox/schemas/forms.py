"""
Snippetbox — Form Schemas and Validation Functions
====================================================

What:  One pydantic model per writable endpoint, bound from the POST body,
       plus a pure validation function per form returning a `Validator`.
How:   `decode_post_form()` (routes/helpers.py) turns the submitted form
       into the model. Type errors there (e.g. expires="abc") are client
       malformation (400). Business rules live in the `validate_*`
       functions below and produce 422 re-renders.

Form data and validation state are kept apart: the model is what the user
typed (echoed back unchanged on re-render), the Validator is what was wrong.
"""

from pydantic import BaseModel

from snippetbox.validator import (
    EMAIL_RX,
    Validator,
    matches,
    max_chars,
    min_chars,
    not_blank,
    permitted_value,
)

BLANK = "This field cannot be blank"
INVALID_EMAIL = "This field must be a valid email address"
TOO_SHORT_PASSWORD = "This field must be at least 8 characters long"

PERMITTED_EXPIRY_DAYS = (1, 7, 365)
DEFAULT_EXPIRY_DAYS = 365
MIN_PASSWORD_CHARS = 8
MAX_TITLE_CHARS = 100


class SnippetCreateForm(BaseModel):
    title: str = ""
    content: str = ""
    # 0 when the field is absent, so a missing radio choice fails validation
    expires: int = 0


class UserSignupForm(BaseModel):
    name: str = ""
    email: str = ""
    password: str = ""


class UserLoginForm(BaseModel):
    email: str = ""
    password: str = ""


class AccountPasswordUpdateForm(BaseModel):
    current_password: str = ""
    new_password: str = ""
    new_password_confirmation: str = ""


def validate_snippet_create(form: SnippetCreateForm) -> Validator:
    v = Validator()
    v.check_field(not_blank(form.title), "title", BLANK)
    v.check_field(
        max_chars(form.title, MAX_TITLE_CHARS),
        "title",
        f"This field cannot be more than {MAX_TITLE_CHARS} characters long",
    )
    v.check_field(not_blank(form.content), "content", BLANK)
    v.check_field(
        permitted_value(form.expires, *PERMITTED_EXPIRY_DAYS),
        "expires",
        "This field must equal 1, 7 or 365",
    )
    return v


def validate_user_signup(form: UserSignupForm) -> Validator:
    v = Validator()
    v.check_field(not_blank(form.name), "name", BLANK)
    v.check_field(not_blank(form.email), "email", BLANK)
    v.check_field(matches(form.email, EMAIL_RX), "email", INVALID_EMAIL)
    v.check_field(not_blank(form.password), "password", BLANK)
    v.check_field(min_chars(form.password, MIN_PASSWORD_CHARS), "password", TOO_SHORT_PASSWORD)
    return v


def validate_user_login(form: UserLoginForm) -> Validator:
    v = Validator()
    v.check_field(not_blank(form.email), "email", BLANK)
    v.check_field(matches(form.email, EMAIL_RX), "email", INVALID_EMAIL)
    v.check_field(not_blank(form.password), "password", BLANK)
    return v


def validate_account_password_update(form: AccountPasswordUpdateForm) -> Validator:
    v = Validator()
    v.check_field(not_blank(form.current_password), "current_password", BLANK)
    v.check_field(not_blank(form.new_password), "new_password", BLANK)
    v.check_field(
        min_chars(form.new_password, MIN_PASSWORD_CHARS), "new_password", TOO_SHORT_PASSWORD
    )
    v.check_field(
        not_blank(form.new_password_confirmation), "new_password_confirmation", BLANK
    )
    v.check_field(
        form.new_password == form.new_password_confirmation,
        "new_password_confirmation",
        "Passwords do not match",
    )
    return v
