from __future__ import annotations

import re
from typing import Any

from email_validator import EmailNotValidError, validate_email

from user_directory.errors import InvalidInputError

MINIMUM_USERNAME_LENGTH = 3
MAXIMUM_USERNAME_LENGTH = 20

_USERNAME_RE = re.compile(r"[A-Za-z0-9_]+")
_FIRST_NAME_RE = re.compile(r"[A-Za-z]+")


def _check_username(username: Any) -> None:
    if not isinstance(username, str) or not username:
        raise InvalidInputError("Username is required")

    if not (MINIMUM_USERNAME_LENGTH <= len(username) <= MAXIMUM_USERNAME_LENGTH):
        raise InvalidInputError(
            f"Username must be between {MINIMUM_USERNAME_LENGTH} and {MAXIMUM_USERNAME_LENGTH} characters"
        )

    if not _USERNAME_RE.fullmatch(username):
        raise InvalidInputError("Username may only contain letters, digits and underscores")

    # "____" and "12345" are both rejected here.
    stripped = username.replace("_", "")
    if not stripped or stripped.isdigit():
        raise InvalidInputError("Username must contain at least one letter")


def _is_valid_email(email: Any) -> bool:
    if not isinstance(email, str) or not email:
        return False
    try:
        # Syntax only: no DNS lookups, and special-use domains (.test, .local) are allowed.
        validate_email(email, check_deliverability=False, globally_deliverable=False)
    except EmailNotValidError:
        return False
    return True


def validate(username: Any, first_name: Any, email: Any, is_active: Any) -> None:
    """Validate the four user fields.

    Rules are checked in a fixed order and the first violation wins; the raised
    ``InvalidInputError`` carries a human-readable reason. Pure, no I/O.
    """
    _check_username(username)

    if not isinstance(first_name, str) or not _FIRST_NAME_RE.fullmatch(first_name):
        raise InvalidInputError("Invalid first name")

    if not _is_valid_email(email):
        raise InvalidInputError("Invalid email")

    # bool is checked by type on purpose: "true", 1 and friends are rejected.
    if not isinstance(is_active, bool):
        raise InvalidInputError("Invalid active status")


def validation_error(username: Any, first_name: Any, email: Any, is_active: Any) -> str | None:
    """Return the first violated rule's message, or None when the input is valid."""
    try:
        validate(username, first_name, email, is_active)
    except InvalidInputError as e:
        return e.message
    return None
