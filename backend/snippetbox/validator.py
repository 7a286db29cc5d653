"""
Snippetbox — Form Validation Helpers
======================================

What:  An error accumulator (`Validator`) plus pure predicate functions.
How:   Validation functions run predicates and feed the results into
       `Validator.check_field`; only the first failure per field is kept.

Usage:
    v = Validator()
    v.check_field(not_blank(form.title), "title", "This field cannot be blank")
    v.check_field(max_chars(form.title, 100), "title", "This field cannot be more than 100 characters long")
    if not v.valid:
        ...  # re-render the form with v.field_errors

Lengths are counted in Unicode code points (`len(str)`), not bytes.
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Pattern, TypeVar, Union

T = TypeVar("T")

# HTML5 "valid e-mail address" shape (W3C), a practical subset of RFC 5322
EMAIL_RX = re.compile(
    r"\A[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*\Z"
)


@dataclass
class Validator:
    """
    Collects validation errors for one form submission.

    Attributes:
        field_errors:     field name → single error message (first one wins)
        non_field_errors: form-level messages, in the order they were added
    """

    field_errors: Dict[str, str] = field(default_factory=dict)
    non_field_errors: List[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.field_errors and not self.non_field_errors

    def add_field_error(self, key: str, message: str) -> None:
        """Record `message` for `key` unless the field already has an error."""
        self.field_errors.setdefault(key, message)

    def add_non_field_error(self, message: str) -> None:
        self.non_field_errors.append(message)

    def check_field(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_field_error(key, message)


def not_blank(value: str) -> bool:
    """True if the string has at least one non-whitespace character."""
    return value.strip() != ""


def max_chars(value: str, n: int) -> bool:
    return len(value) <= n


def min_chars(value: str, n: int) -> bool:
    return len(value) >= n


def permitted_value(value: T, *permitted_values: T) -> bool:
    return value in permitted_values


def matches(value: str, rx: Union[Pattern[str], str]) -> bool:
    """True if the pattern matches anywhere in the string; anchor it to match whole values."""
    if isinstance(rx, str):
        rx = re.compile(rx)
    return rx.search(value) is not None
