"""Client composition root: build and lifecycle-manage the shared HTTP client.

Collaborators built here share one AbstractHttpClient (one connection pool)
instead of opening a client per request.
"""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from deki.app.application.api import Api
from deki.app.application.base import api_plug
from deki.app.application.files import File
from deki.app.application.users import User, UserManager
from deki.app.config.defaults import create_settings
from deki.app.config.settings import Settings
from deki.app.core import SERVICE_NAME
from deki.app.domain.plug import Plug
from deki.app.infrastructure.http.factory import create_http_client
from deki.app.ports.http_client import AbstractHttpClient


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class ClientDependencies:
    """Holds the wired HTTP client and hands out collaborators bound to it."""

    def __init__(
        self,
        *,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._http_client: AbstractHttpClient | None = None
        self._connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def http_client(self) -> AbstractHttpClient:
        if self._http_client is None:
            raise RuntimeError("http_client is not initialized")
        return self._http_client

    async def connect(self) -> None:
        if self._connected:
            return
        self._http_client = create_http_client(self._settings, transport=self._transport)
        self._connected = True
        _log("client_connected", host=self._settings.host)

    async def close(self) -> None:
        if self._http_client is not None:
            try:
                await self._http_client.close()
            except Exception as exc:
                logger.warning("http client close failed: {}", exc)
            self._http_client = None
        if self._connected:
            _log("client_closed", host=self._settings.host)
        self._connected = False

    async def __aenter__(self) -> "ClientDependencies":
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def plug(self, *segments: Any) -> Plug:
        """Plug at the API root plus ``segments``, bound to the shared client."""
        return api_plug(self._settings, self.http_client, *segments)

    def api(self) -> Api:
        return Api(self._settings, http_client=self.http_client)

    def users(self) -> UserManager:
        return UserManager(self._settings, http_client=self.http_client)

    def user(self, user_id: int | str = "current") -> User:
        return User(user_id, self._settings, http_client=self.http_client)

    def file(self, file_id: int) -> File:
        return File(file_id, self._settings, http_client=self.http_client)


def create_client_dependencies(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ClientDependencies:
    return ClientDependencies(settings=settings or create_settings(), transport=transport)
