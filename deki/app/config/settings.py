"""Settings for API access: host, default query/headers, token, origin and cookie manager."""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Optional, Union
from urllib.parse import urlsplit

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from deki.app.constants import (
    DEFAULT_HEADERS,
    DEFAULT_MAX_REDIRECTS,
    DEFAULT_QUERY_PARAMS,
    DEFAULT_UPLOAD_CHUNK_SIZE,
    REQUESTED_WITH_HEADER,
    TOKEN_HEADER,
)
from deki.app.domain.plug import PlugConfig
from deki.app.ports.cookie_manager import CookieManager
from deki.app.ports.http_client import AbstractHttpClient, RequestDescriptor

TokenSource = Union[str, Callable[[], str]]


def _origin_of(url: str) -> tuple[str, str]:
    parts = urlsplit(url)
    return (parts.scheme.lower(), parts.netloc.lower())


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
        frozen=True,
    )

    host: str = Field("", validation_alias="DEKI_HOST")
    query_params: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_QUERY_PARAMS),
        validation_alias="DEKI_QUERY_PARAMS",
    )
    headers: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_HEADERS),
        validation_alias="DEKI_HEADERS",
    )
    # A string, or a zero-argument callable resolved on every request.
    token: Optional[TokenSource] = Field(None, validation_alias="DEKI_TOKEN")
    origin: Optional[str] = Field(None, validation_alias="DEKI_ORIGIN")

    timeout_seconds: Optional[float] = Field(None, validation_alias="DEKI_TIMEOUT_SECONDS")
    max_redirects: int = Field(DEFAULT_MAX_REDIRECTS, ge=0, validation_alias="DEKI_MAX_REDIRECTS")
    upload_chunk_size: int = Field(DEFAULT_UPLOAD_CHUNK_SIZE, gt=0, validation_alias="DEKI_UPLOAD_CHUNK_SIZE")

    cookie_manager: Any = Field(None, exclude=True)

    @field_validator("cookie_manager")
    @classmethod
    def _check_cookie_manager(cls, value: Any) -> Any:
        if value is not None and not isinstance(value, CookieManager):
            raise ValueError("cookie_manager must provide get_cookie_string() and store_cookies()")
        return value

    @model_validator(mode="after")
    def _mark_same_origin(self) -> "Settings":
        if self.origin and self.host and _origin_of(self.origin) == _origin_of(self.host):
            self.headers[REQUESTED_WITH_HEADER] = "XMLHttpRequest"
        return self

    def resolve_token(self) -> str | None:
        if self.token is None:
            return None
        if callable(self.token):
            return self.token()
        return self.token

    def before_request(self, request: RequestDescriptor) -> RequestDescriptor:
        token = self.resolve_token()
        if token is None:
            return request
        return replace(request, headers={**request.headers, TOKEN_HEADER: token})

    def plug_config(self, http_client: AbstractHttpClient | None = None) -> PlugConfig:
        """Snapshot of these settings as consumed by a Plug."""
        return PlugConfig(
            query=tuple(self.query_params.items()),
            headers=dict(self.headers),
            timeout=self.timeout_seconds,
            before_request=self.before_request,
            cookie_manager=self.cookie_manager,
            max_redirects=self.max_redirects,
            upload_chunk_size=self.upload_chunk_size,
            http_client=http_client,
        )
