"""Cookie hand-off between requests/responses and the injected CookieManager.

Without a manager both steps are no-ops.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any

from loguru import logger

from deki.app.core import SERVICE_NAME
from deki.app.ports.cookie_manager import CookieManager
from deki.app.ports.http_client import HttpResponse, RequestDescriptor

COOKIE_HEADER = "Cookie"
SET_COOKIE_HEADER = "Set-Cookie"


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).debug("")


async def inject_cookies(
    manager: CookieManager | None,
    request: RequestDescriptor,
    url: str | None = None,
) -> RequestDescriptor:
    """Return ``request`` with a ``Cookie`` header for ``url`` (defaults to the request URL)."""
    if manager is None:
        return request
    cookie_string = await manager.get_cookie_string(url or request.url)
    if not cookie_string:
        return request
    headers = {key: value for key, value in request.headers.items() if key.lower() != "cookie"}
    headers[COOKIE_HEADER] = cookie_string
    return replace(request, headers=headers)


def extract_set_cookie_values(response: HttpResponse) -> list[str]:
    return list(response.header_values(SET_COOKIE_HEADER))


async def store_cookies(manager: CookieManager | None, response: HttpResponse) -> None:
    """Persist every ``Set-Cookie`` value of ``response`` keyed by its resolved URL."""
    if manager is None:
        return
    cookies = extract_set_cookie_values(response)
    if not cookies:
        return
    await manager.store_cookies(response.url, cookies)
    _log("cookies_stored", url=response.url, count=len(cookies))
