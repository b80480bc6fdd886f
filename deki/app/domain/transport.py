"""Transport: executes one logical HTTP call over the AbstractHttpClient port.

Per hop: inject cookies, send, store cookies, classify. A response is a
redirect when it carries ``Location`` and a 301/302/303/307/308 status. With
redirect following enabled and no cookie manager the primitive follows
redirects itself; with a cookie manager the Transport follows them hop by hop
so cookies are attached and stored at every hop. The hop count is bounded.

On hop-by-hop follows 307 and 308 resend the same method and body, while 301,
302 and 303 switch to GET and drop both the body and its ``Content-Length``
header. The primitive applies its own rewriting rules when it follows.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Any
from urllib.parse import urljoin

from loguru import logger

from deki.app.constants import (
    DEFAULT_MAX_REDIRECTS,
    HTTP_METHOD,
    METHOD_PRESERVING_REDIRECTS,
    NOT_MODIFIED,
    REDIRECT_STATUS_CODES,
)
from deki.app.core import SERVICE_NAME
from deki.app.domain.cookies import inject_cookies, store_cookies
from deki.app.errors import HttpError, TooManyRedirectsError, TransportError
from deki.app.ports.cookie_manager import CookieManager
from deki.app.ports.http_client import AbstractHttpClient, HttpResponse, RequestDescriptor


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).debug("")


def location_of(response: HttpResponse) -> str | None:
    values = response.header_values("Location")
    return values[0] if values else None


def is_redirect(response: HttpResponse) -> bool:
    return response.status_code in REDIRECT_STATUS_CODES and location_of(response) is not None


def is_error(response: HttpResponse) -> bool:
    status = response.status_code
    return not 200 <= status < 300 and status != NOT_MODIFIED


def http_error_from(response: HttpResponse) -> HttpError:
    return HttpError(response.reason_phrase, response.status_code, response.text)


def redirect_request(request: RequestDescriptor, response: HttpResponse) -> RequestDescriptor:
    """Build the next hop: 307/308 keep the method and body, the others switch to GET without a body."""
    target = urljoin(response.url, location_of(response) or "")
    if response.status_code in METHOD_PRESERVING_REDIRECTS:
        return replace(request, url=target)
    headers = {key: value for key, value in request.headers.items() if key.lower() != "content-length"}
    return replace(request, url=target, method=HTTP_METHOD.GET, headers=headers, body=None)


class Transport:
    """Redirect- and cookie-aware executor for one logical call."""

    def __init__(
        self,
        client: AbstractHttpClient,
        *,
        cookie_manager: CookieManager | None = None,
        follow_redirects: bool = True,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._cookie_manager = cookie_manager
        self._follow_redirects = follow_redirects
        self._max_redirects = max_redirects
        self._timeout = timeout

    @property
    def follows_manually(self) -> bool:
        return self._follow_redirects and self._cookie_manager is not None

    async def execute(self, request: RequestDescriptor) -> HttpResponse:
        hops = 0
        while True:
            response = await self._exchange(request)
            if is_redirect(response):
                if not self._follow_redirects:
                    return response
                if self.follows_manually:
                    if hops >= self._max_redirects:
                        _log("too_many_redirects", url=request.url, hops=hops)
                        raise TooManyRedirectsError(
                            f"exceeded {self._max_redirects} redirects starting from {request.url}"
                        )
                    hops += 1
                    request = redirect_request(request, response)
                    _log(
                        "redirect_followed",
                        status=response.status_code,
                        location=request.url,
                        method=request.method,
                        hop=hops,
                    )
                    continue
            if is_error(response):
                error = http_error_from(response)
                logger.bind(
                    service_name=SERVICE_NAME,
                    event="http_error",
                    url=response.url,
                    status=error.status,
                ).warning("")
                raise error
            return response

    async def _exchange(self, request: RequestDescriptor) -> HttpResponse:
        outgoing = await inject_cookies(self._cookie_manager, request)
        _log("request_sent", url=outgoing.url, method=outgoing.method)
        try:
            response = await self._client.send(
                outgoing,
                follow_redirects=self._follow_redirects and self._cookie_manager is None,
                timeout=self._timeout,
            )
        except TransportError as exc:
            logger.bind(
                service_name=SERVICE_NAME,
                event="transport_error",
                url=outgoing.url,
                error=str(exc),
            ).warning("")
            raise
        await store_cookies(self._cookie_manager, response)
        return response
