from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from user_directory.user_store import User


class UserPayload(BaseModel):
    """Create/update request body.

    Fields are deliberately loose so the validator, not schema parsing, decides
    what is acceptable and reports it with a 400.
    """

    model_config = ConfigDict(populate_by_name=True)

    username: Any = Field(default="", description="3-20 letters, digits or underscores")
    first_name: Any = Field(default="", alias="firstName", description="Letters only")
    email: Any = Field(default="", description="Email address")
    is_active: Any = Field(default=None, alias="isActive", description="Account active flag")


class UserOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: str
    first_name: str = Field(alias="firstName")
    email: str
    is_active: bool = Field(alias="isActive")

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(username=user.username, first_name=user.first_name, email=user.email, is_active=user.is_active)


class ErrorDetail(BaseModel):
    kind: str
    message: str
    field: Optional[str] = None
