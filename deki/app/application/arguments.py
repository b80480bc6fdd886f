"""Argument shapes accepted by collaborators, validated before any request is made."""
from __future__ import annotations

from typing import Literal, Optional, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field

from deki.app.errors import ValidationError

ArgsT = TypeVar("ArgsT", bound=BaseModel)


class _Arguments(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)


class ExcludeArgs(_Arguments):
    exclude: list[str] = Field(default_factory=list)


class UserSearchConstraints(_Arguments):
    groupid: Optional[int] = None
    fullname: Optional[str] = None
    active: Optional[bool] = None
    authprovider: Optional[int] = None
    email: Optional[str] = None
    seated: Optional[bool] = None
    username: Optional[str] = None
    roleid: Optional[int] = None
    limit: Optional[int] = None
    format: Optional[Literal["autocomplete", "default", "verbose"]] = None


class AuthenticateArgs(_Arguments):
    method: Literal["get", "post"] = "get"
    username: str
    password: str


class UserUpdateOptions(_Arguments):
    active: Optional[bool] = None
    seated: Optional[bool] = None
    username: Optional[str] = None
    full_name: Optional[str] = None
    email: Optional[str] = None
    language: Optional[str] = None
    time_zone: Optional[str] = None


class SetPasswordArgs(_Arguments):
    new_password: str
    current_password: Optional[str] = None


class FileRevisionArgs(_Arguments):
    name: str = Field(min_length=1)
    size: Optional[int] = Field(None, ge=0)
    content_type: Optional[str] = None


def validate_arguments(model: type[ArgsT], **values: object) -> ArgsT:
    """Build ``model`` from ``values``; pydantic failures become ValidationError."""
    try:
        return model(**values)
    except pydantic.ValidationError as exc:
        messages = [
            f"{'.'.join(str(part) for part in error['loc']) or model.__name__}: {error['msg']}"
            for error in exc.errors()
        ]
        raise ValidationError(", ".join(messages)) from exc
