"""HTTP client factory: builds AbstractHttpClient from settings (no provider logic in composition)."""
from __future__ import annotations

from typing import Any

import httpx

from deki.app.config.settings import Settings
from deki.app.constants import DEFAULT_MAX_REDIRECTS
from deki.app.ports.http_client import AbstractHttpClient
from deki.app.infrastructure.http.httpx_client import HttpxHttpClient


def create_http_client(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    max_redirects: int | None = None,
) -> AbstractHttpClient:
    """Build an HTTP client from settings. Per-request timeouts are applied by the adapter.

    ``transport`` replaces the network layer (e.g. ``httpx.MockTransport`` in tests).
    """
    client_kwargs: dict[str, Any] = {
        "max_redirects": DEFAULT_MAX_REDIRECTS,
        "transport": transport,
    }
    if settings is not None:
        client_kwargs["max_redirects"] = settings.max_redirects
        # Unset keeps httpx's default timeout rather than disabling it.
        if settings.timeout_seconds is not None:
            client_kwargs["timeout"] = settings.timeout_seconds
    if max_redirects is not None:
        client_kwargs["max_redirects"] = max_redirects
    return HttpxHttpClient(httpx.AsyncClient(**client_kwargs))
