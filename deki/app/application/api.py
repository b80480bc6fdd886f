from __future__ import annotations

from deki.app.application.base import api_plug
from deki.app.config.settings import Settings
from deki.app.ports.http_client import AbstractHttpClient, HttpResponse


class Api:
    """Connectivity probes against the API root."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        http_client: AbstractHttpClient | None = None,
    ) -> None:
        self._plug = api_plug(settings, http_client)

    async def http(self) -> HttpResponse:
        return await self._plug.at("http").get()

    async def f1(self) -> HttpResponse:
        return await self._plug.at("f1").get()
