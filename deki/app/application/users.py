"""User collaborators: the current user, lookups, search, authentication and updates."""
from __future__ import annotations

import base64
from typing import Any

from deki.app.application.arguments import (
    AuthenticateArgs,
    ExcludeArgs,
    SetPasswordArgs,
    UserSearchConstraints,
    UserUpdateOptions,
    validate_arguments,
)
from deki.app.application.base import api_plug, parse_json
from deki.app.config.defaults import create_settings
from deki.app.config.settings import Settings
from deki.app.constants import CONTENT_TYPE, SESSION_HEADER
from deki.app.domain.utility import clean_params, escape_html, get_resource_id
from deki.app.errors import DekiError, HttpError
from deki.app.ports.http_client import AbstractHttpClient
from deki.app.schemas.api_error import to_api_request_error
from deki.app.schemas.user import USER_LIST_SCHEMA, USER_SCHEMA

# Option name -> XML element of the user document.
_UPDATE_ELEMENTS = {
    "username": "username",
    "full_name": "fullname",
    "email": "email",
    "language": "language",
    "time_zone": "timezone",
}


def _user_update_xml(options: UserUpdateOptions) -> str:
    parts = ["<user>"]
    for key, value in options.model_dump(exclude_none=True).items():
        if key == "active":
            parts.append(f"<status>{'active' if value else 'inactive'}</status>")
        elif key == "seated":
            parts.append(f"<license.seat>{'true' if value else 'false'}</license.seat>")
        else:
            element = _UPDATE_ELEMENTS[key]
            parts.append(f"<{element}>{escape_html(value)}</{element}>")
    parts.append("</user>")
    return "".join(parts)


class User:
    """A single user, addressed by numeric id or username (default: the current user)."""

    def __init__(
        self,
        user_id: int | str = "current",
        settings: Settings | None = None,
        *,
        http_client: AbstractHttpClient | None = None,
    ) -> None:
        self._id = get_resource_id(user_id, "current")
        self._plug = api_plug(settings, http_client, "users", self._id)

    @property
    def resource_id(self) -> Any:
        return self._id

    async def get_info(self, *, exclude: list[str] | None = None) -> dict[str, Any]:
        args = validate_arguments(ExcludeArgs, exclude=[] if exclude is None else exclude)
        response = await self._plug.with_param("exclude", ",".join(args.exclude)).get()
        return parse_json(response, USER_SCHEMA)

    async def update(self, **options: Any) -> dict[str, Any]:
        args = validate_arguments(UserUpdateOptions, **options)
        try:
            response = await self._plug.put(_user_update_xml(args), CONTENT_TYPE.XML)
        except HttpError as exc:
            raise to_api_request_error(exc) from exc
        return parse_json(response, USER_SCHEMA)

    async def set_password(self, new_password: str, current_password: str | None = None) -> dict[str, str]:
        args = validate_arguments(
            SetPasswordArgs,
            new_password=new_password,
            current_password=current_password,
        )
        plug = self._plug.at("password")
        if args.current_password:
            plug = plug.with_param("currentpassword", args.current_password)
        try:
            response = await plug.put(args.new_password, CONTENT_TYPE.TEXT)
        except HttpError as exc:
            raise to_api_request_error(exc) from exc
        return {"authToken": response.text}


class UserManager:
    """The users of a site."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: AbstractHttpClient | None = None,
    ) -> None:
        self._settings = settings or create_settings()
        self._http_client = http_client
        self._plug = api_plug(self._settings, http_client, "users")

    async def get_current_user(self, *, exclude: list[str] | None = None) -> dict[str, Any]:
        args = validate_arguments(ExcludeArgs, exclude=[] if exclude is None else exclude)
        response = await self._plug.at("current").with_param("exclude", ",".join(args.exclude)).get()
        return parse_json(response, USER_SCHEMA)

    async def get_current_user_activity_token(self) -> str:
        """``"{user id}:{session id}"`` for the signed-in user."""
        response = await self._plug.at("current").with_param("exclude", ["groups", "properties"]).get()
        user = parse_json(response, USER_SCHEMA)
        session = response.header_values(SESSION_HEADER)
        if not session:
            raise DekiError(f"Could not fetch an {SESSION_HEADER} HTTP header from the API.")
        return f"{user['id']}:{session[0]}"

    async def get_users(self) -> dict[str, Any]:
        response = await self._plug.get()
        return parse_json(response, USER_LIST_SCHEMA)

    async def search_users(self, **constraints: Any) -> dict[str, Any]:
        args = validate_arguments(UserSearchConstraints, **constraints)
        response = await self._plug.at("search").with_params(clean_params(args.model_dump())).get()
        return parse_json(response, USER_LIST_SCHEMA)

    async def authenticate(self, *, username: str, password: str, method: str = "GET") -> str:
        """Authenticate with Basic credentials; returns the auth token text."""
        args = validate_arguments(
            AuthenticateArgs,
            method=method.lower() if isinstance(method, str) else method,
            username=username,
            password=password,
        )
        credentials = base64.b64encode(f"{args.username}:{args.password}".encode("utf-8")).decode("ascii")
        plug = self._plug.at("authenticate").with_header("Authorization", f"Basic {credentials}")
        response = await (plug.post() if args.method == "post" else plug.get())
        return response.text

    def get_user(self, user_id: int | str = "current") -> User:
        return User(user_id, self._settings, http_client=self._http_client)
