from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Literal, Optional, TypeVar, Union

T = TypeVar("T")

DuplicateField = Literal["username", "email", "both"]


class ErrorKind(str, Enum):
    invalid_input = "invalid_input"
    duplicate = "duplicate"
    store_error = "store_error"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    # Only set for ErrorKind.duplicate.
    field: Optional[DuplicateField] = None
    not_found: bool = False

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


class UserDirectoryError(Exception):
    """Base class for errors raised inside the user directory core.

    Each subclass knows how to turn itself into the tagged ``Err`` variant that
    the public store operations return.
    """

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_err(self) -> Err:
        return Err(kind=self.kind, message=self.message)


class InvalidInputError(UserDirectoryError, ValueError):
    kind = ErrorKind.invalid_input


_DUPLICATE_MESSAGES: dict[str, str] = {
    "username": "Username already exists",
    "email": "Email already exists",
    "both": "Username and email already exist",
}


class DuplicateError(UserDirectoryError, ValueError):
    kind = ErrorKind.duplicate

    def __init__(self, field: DuplicateField):
        super().__init__(_DUPLICATE_MESSAGES[field])
        self.field: DuplicateField = field

    def to_err(self) -> Err:
        return Err(kind=self.kind, message=self.message, field=self.field)


class StoreError(UserDirectoryError, RuntimeError):
    kind = ErrorKind.store_error

    def __init__(self, message: str, *, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found

    def to_err(self) -> Err:
        return Err(kind=self.kind, message=self.message, not_found=self.not_found)
