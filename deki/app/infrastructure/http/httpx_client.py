"""Concrete HTTP client implementation using httpx (injected where AbstractHttpClient is needed)."""
from __future__ import annotations

from typing import Any, AsyncIterator, Callable

import httpx

from deki.app.constants import DEFAULT_UPLOAD_CHUNK_SIZE
from deki.app.errors import TooManyRedirectsError, TransportError
from deki.app.ports.http_client import AbstractHttpClient, HttpResponse, RequestDescriptor, RequestBody


class _HttpxResponseAdapter:
    """Adapts httpx.Response to the HttpResponse protocol."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def reason_phrase(self) -> str:
        return self._response.reason_phrase

    @property
    def url(self) -> str:
        return str(self._response.url)

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._response.headers)

    @property
    def text(self) -> str:
        return self._response.text

    @property
    def content(self) -> bytes:
        return self._response.content

    def header_values(self, name: str) -> list[str]:
        return self._response.headers.get_list(name)

    def json(self) -> Any:
        return self._response.json()

    def __repr__(self) -> str:
        return f"<HttpResponse [{self.status_code}] {self.url}>"


def _encode_body(body: RequestBody) -> bytes | None:
    if body is None:
        return None
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


async def _iter_with_progress(
    content: bytes,
    chunk_size: int,
    on_progress: Callable[[int], None],
) -> AsyncIterator[bytes]:
    sent = 0
    for start in range(0, len(content), chunk_size):
        chunk = content[start:start + chunk_size]
        yield chunk
        # Resumed by httpx once the chunk has been written.
        sent += len(chunk)
        on_progress(sent)


def _has_header(headers: dict[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


class HttpxHttpClient(AbstractHttpClient):
    """AbstractHttpClient implementation using httpx.AsyncClient.

    Requests are built as bare ``httpx.Request`` objects so the client's own
    cookie jar and default headers never leak into outgoing requests; cookies
    are the Transport's business.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    def _timeout(self, timeout: float | None) -> httpx.Timeout:
        if timeout is None:
            return self._client.timeout
        return httpx.Timeout(timeout)

    async def send(
        self,
        request: RequestDescriptor,
        *,
        follow_redirects: bool,
        timeout: float | None = None,
        on_upload_progress: Callable[[int], None] | None = None,
        chunk_size: int | None = None,
    ) -> HttpResponse:
        headers = dict(request.headers)
        content: Any = _encode_body(request.body)
        if on_upload_progress is not None and content is not None:
            if not _has_header(headers, "Content-Length"):
                headers["Content-Length"] = str(len(content))
            content = _iter_with_progress(
                content,
                chunk_size or DEFAULT_UPLOAD_CHUNK_SIZE,
                on_upload_progress,
            )
        try:
            httpx_request = httpx.Request(
                request.method,
                request.url,
                headers=headers,
                content=content,
                extensions={"timeout": self._timeout(timeout).as_dict()},
            )
            response = await self._client.send(httpx_request, follow_redirects=follow_redirects)
            return _HttpxResponseAdapter(response)
        except httpx.TooManyRedirects as exc:
            raise TooManyRedirectsError(f"too many redirects while requesting {request.url}") from exc
        except httpx.TimeoutException as exc:
            raise TransportError(f"timeout while requesting {request.url}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"http request failed for {request.url}: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()
