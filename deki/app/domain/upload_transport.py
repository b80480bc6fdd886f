"""UploadTransport: sends a body while reporting byte-level upload progress.

Progress sequence: ``0/size`` before sending, ``sent/size`` after every chunk
handed to the connection, and ``size/size`` once a 2xx response arrives.
Redirects are not followed; a redirect response is returned as-is.
"""
from __future__ import annotations

from typing import Any

from loguru import logger

from deki.app.constants import DEFAULT_UPLOAD_CHUNK_SIZE
from deki.app.core import SERVICE_NAME
from deki.app.domain.cookies import inject_cookies, store_cookies
from deki.app.domain.transport import http_error_from, is_redirect
from deki.app.errors import TransportError, UploadInitiationError
from deki.app.ports.cookie_manager import CookieManager
from deki.app.ports.http_client import (
    AbstractHttpClient,
    HttpResponse,
    RequestDescriptor,
    UploadProgress,
)


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).debug("")


class UploadTransport:
    def __init__(
        self,
        client: AbstractHttpClient,
        *,
        cookie_manager: CookieManager | None = None,
        timeout: float | None = None,
        chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE,
    ) -> None:
        self._client = client
        self._cookie_manager = cookie_manager
        self._timeout = timeout
        self._chunk_size = chunk_size

    async def execute(self, request: RequestDescriptor) -> HttpResponse:
        progress = request.progress
        if progress is None:
            raise ValueError("an upload request requires a progress hint")
        total = progress.size

        def report(loaded: int) -> None:
            progress.callback(UploadProgress(loaded=loaded, total=total))

        outgoing = await inject_cookies(self._cookie_manager, request)
        _log("upload_started", url=outgoing.url, method=outgoing.method, size=total)
        report(0)
        try:
            response = await self._client.send(
                outgoing,
                follow_redirects=False,
                timeout=self._timeout,
                on_upload_progress=report,
                chunk_size=self._chunk_size,
            )
        except TransportError as exc:
            logger.bind(
                service_name=SERVICE_NAME,
                event="upload_failed",
                url=outgoing.url,
                error=str(exc),
            ).warning("")
            raise UploadInitiationError(
                f"An error occurred while initiating the file upload to {outgoing.url}"
            ) from exc

        if is_redirect(response):
            await store_cookies(self._cookie_manager, response)
            return response
        if 200 <= response.status_code < 300:
            report(total)
            await store_cookies(self._cookie_manager, response)
            _log("upload_completed", url=response.url, status=response.status_code)
            return response

        error = http_error_from(response)
        logger.bind(
            service_name=SERVICE_NAME,
            event="upload_failed",
            url=response.url,
            status=error.status,
        ).warning("")
        raise error
