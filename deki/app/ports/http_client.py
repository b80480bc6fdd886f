"""HTTP client port: contract for performing one HTTP exchange.

Domain code (Plug, Transport, UploadTransport) depends on this port;
infrastructure (httpx) implements it. Keeps domain free of infrastructure imports.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Protocol, Union, runtime_checkable

RequestBody = Union[bytes, str, None]


@dataclass(frozen=True)
class UploadProgress:
    """One upload progress notification."""

    loaded: int
    total: int


@dataclass(frozen=True)
class ProgressInfo:
    """Progress hint supplied with an upload: declared size and a callback."""

    size: int
    callback: Callable[[UploadProgress], None]


@dataclass(frozen=True)
class RequestDescriptor:
    """A single outgoing request. Built per call and passed through ``before_request``."""

    url: str
    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: RequestBody = None
    progress: ProgressInfo | None = None


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal read-only view of an HTTP response."""

    @property
    def status_code(self) -> int: ...

    @property
    def reason_phrase(self) -> str: ...

    @property
    def url(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def text(self) -> str: ...

    @property
    def content(self) -> bytes: ...

    def header_values(self, name: str) -> list[str]:
        """All values of a possibly repeated header (e.g. ``Set-Cookie``)."""
        ...

    def json(self) -> Any: ...


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Port: perform one HTTP exchange. Implementations live in infrastructure."""

    async def send(
        self,
        request: RequestDescriptor,
        *,
        follow_redirects: bool,
        timeout: float | None = None,
        on_upload_progress: Callable[[int], None] | None = None,
        chunk_size: int | None = None,
    ) -> HttpResponse:
        """Send the request; raise TransportError when no response is obtained.

        When ``on_upload_progress`` is given the body is streamed and the callback
        receives the cumulative number of bytes sent after every chunk.
        """
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
