from __future__ import annotations

import pytest

from user_directory.errors import InvalidInputError
from user_directory.validators import validate, validation_error

VALID = ("alex_w", "Alex", "alex.w@example.com", True)


def _with(**overrides):
    username, first_name, email, is_active = VALID
    args = {"username": username, "first_name": first_name, "email": email, "is_active": is_active}
    args.update(overrides)
    return args["username"], args["first_name"], args["email"], args["is_active"]


def test_valid_input_passes() -> None:
    validate(*VALID)
    assert validation_error(*VALID) is None


@pytest.mark.parametrize(
    "username",
    ["abc", "a" * 20, "a_1", "_x_", "Sam99", "ABC"],
)
def test_accepts_valid_usernames(username: str) -> None:
    assert validation_error(*_with(username=username)) is None


@pytest.mark.parametrize("email", ["x@example.com", "a@b.test", "a@b.local", "first.last+tag@sub.example.org"])
def test_accepts_syntactically_valid_emails(email: str) -> None:
    assert validation_error(*_with(email=email)) is None


@pytest.mark.parametrize(
    "username, message",
    [
        ("", "Username is required"),
        (None, "Username is required"),
        ("ab", "Username must be between 3 and 20 characters"),
        ("a" * 21, "Username must be between 3 and 20 characters"),
        ("alex-w", "Username may only contain letters, digits and underscores"),
        ("alex w", "Username may only contain letters, digits and underscores"),
        ("alex\n", "Username may only contain letters, digits and underscores"),
        ("12345", "Username must contain at least one letter"),
        ("____", "Username must contain at least one letter"),
        ("1_2_3", "Username must contain at least one letter"),
    ],
)
def test_rejects_invalid_usernames(username, message: str) -> None:
    with pytest.raises(InvalidInputError) as exc:
        validate(*_with(username=username))
    assert exc.value.message == message


@pytest.mark.parametrize("first_name", ["", "Sara1", "Mary Ann", "O'Neil", None])
def test_rejects_invalid_first_names(first_name) -> None:
    assert validation_error(*_with(first_name=first_name)) == "Invalid first name"


@pytest.mark.parametrize("email", ["", "not-an-email", "a@", "@example.com", None])
def test_rejects_invalid_emails(email) -> None:
    assert validation_error(*_with(email=email)) == "Invalid email"


@pytest.mark.parametrize("is_active", ["true", 1, 0, None])
def test_is_active_must_be_a_real_bool(is_active) -> None:
    assert validation_error(*_with(is_active=is_active)) == "Invalid active status"


def test_first_failure_wins() -> None:
    # Username and email are both invalid; the username rule comes first.
    assert validation_error("ab", "Alex", "nope", "yes") == "Username must be between 3 and 20 characters"


def test_validation_is_idempotent() -> None:
    assert validation_error("12345", "Alex", "x@example.com", True) == validation_error(
        "12345", "Alex", "x@example.com", True
    )
