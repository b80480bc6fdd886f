"""Plug: immutable builder of an absolute URL plus request configuration.

Every builder method returns a new Plug; the receiver is never modified.
Request methods build a RequestDescriptor, pass it through ``before_request``
and hand it to the Transport (or the UploadTransport when a progress hint is
supplied).

Query strings use ``application/x-www-form-urlencoded`` encoding throughout:
a space becomes ``+`` and a literal ``+`` becomes ``%2B``.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, AsyncIterator, Callable, Iterable, Mapping
from urllib.parse import parse_qsl, quote, quote_plus, urlsplit

from deki.app.constants import DEFAULT_MAX_REDIRECTS, DEFAULT_UPLOAD_CHUNK_SIZE, HTTP_METHOD
from deki.app.domain.transport import Transport
from deki.app.domain.upload_transport import UploadTransport
from deki.app.errors import ConstructionError
from deki.app.ports.cookie_manager import CookieManager
from deki.app.ports.http_client import (
    AbstractHttpClient,
    HttpResponse,
    ProgressInfo,
    RequestBody,
    RequestDescriptor,
)

BeforeRequest = Callable[[RequestDescriptor], RequestDescriptor]

# Characters left as-is in path segments. "/" splits a segment into several
# and "%" keeps pre-encoded ids intact.
_PATH_SAFE = "/!$&'()*+,;=:@%~-._[]|^\\"


def _identity(request: RequestDescriptor) -> RequestDescriptor:
    return request


def stringify_query_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(stringify_query_value(item) for item in value)
    return str(value)


def encode_query_value(value: str) -> str:
    return quote_plus(value, safe="")


def encode_query(pairs: Iterable[tuple[str, str]]) -> str:
    return "&".join(f"{encode_query_value(key)}={encode_query_value(value)}" for key, value in pairs)


def _flatten_segments(segments: Iterable[Any]) -> Iterable[str]:
    for segment in segments:
        if isinstance(segment, (list, tuple)):
            yield from _flatten_segments(segment)
            continue
        text = str(segment)
        if text.startswith("/"):
            text = text[1:]
        yield text


@dataclass(frozen=True)
class UrlState:
    """Parsed absolute URL. Owned by exactly one Plug and never mutated."""

    scheme: str
    netloc: str
    path: str = ""
    query: tuple[tuple[str, str], ...] = ()
    fragment: str = ""

    @classmethod
    def parse(cls, url: str) -> "UrlState":
        if not url or not isinstance(url, str):
            raise ConstructionError("A full, valid URL must be specified")
        try:
            parts = urlsplit(url.strip())
            parts.port  # raises on a malformed port
        except ValueError as exc:
            raise ConstructionError(f"Unable to construct a URL object from {url}") from exc
        if not parts.scheme or not parts.netloc:
            raise ConstructionError(f"Unable to construct a URL object from {url}")
        return cls(
            scheme=parts.scheme.lower(),
            netloc=parts.netloc,
            path=parts.path,
            query=tuple(parse_qsl(parts.query, keep_blank_values=True)),
            fragment=parts.fragment,
        )

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(segment for segment in self.path.split("/") if segment)

    def with_segments(self, segments: Iterable[Any]) -> "UrlState":
        added = "".join(f"/{quote(segment, safe=_PATH_SAFE)}" for segment in _flatten_segments(segments))
        base = self.path.rstrip("/")
        return replace(self, path=f"{base}{added}")

    def with_query(self, pairs: Iterable[tuple[str, Any]]) -> "UrlState":
        added = tuple((str(key), stringify_query_value(value)) for key, value in pairs)
        return replace(self, query=self.query + added)

    def without_query(self, key: str) -> "UrlState":
        return replace(self, query=tuple(pair for pair in self.query if pair[0] != key))

    def __str__(self) -> str:
        url = f"{self.scheme}://{self.netloc}{self.path or '/'}"
        if self.query:
            url = f"{url}?{encode_query(self.query)}"
        if self.fragment:
            url = f"{url}#{self.fragment}"
        return url


@dataclass(frozen=True)
class PlugConfig:
    """Everything a Plug carries besides its URL."""

    query: tuple[tuple[str, Any], ...] = ()
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    timeout: float | None = None
    before_request: BeforeRequest = _identity
    cookie_manager: CookieManager | None = None
    follow_redirects: bool = True
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    upload_chunk_size: int = DEFAULT_UPLOAD_CHUNK_SIZE
    http_client: AbstractHttpClient | None = None


class Plug:
    """Immutable URL-plus-configuration builder for one logical endpoint."""

    def __init__(self, url: str, config: PlugConfig | None = None) -> None:
        config = config or PlugConfig()
        self._url = UrlState.parse(url).with_query(config.query)
        self._config = replace(config, query=(), headers=MappingProxyType(dict(config.headers)))

    def _derive(self, *, url: UrlState | None = None, **changes: Any) -> "Plug":
        clone = object.__new__(type(self))
        clone._url = url if url is not None else self._url
        clone._config = replace(self._config, **changes) if changes else self._config
        return clone

    @property
    def url(self) -> str:
        return str(self._url)

    @property
    def path(self) -> str:
        return self._url.path or "/"

    @property
    def segments(self) -> tuple[str, ...]:
        return self._url.segments

    @property
    def query(self) -> tuple[tuple[str, str], ...]:
        return self._url.query

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.headers)

    @property
    def following_redirects(self) -> bool:
        return self._config.follow_redirects

    @property
    def timeout(self) -> float | None:
        return self._config.timeout

    @property
    def config(self) -> PlugConfig:
        return self._config

    def __repr__(self) -> str:
        return f"<Plug {self.url}>"

    def at(self, *segments: Any) -> "Plug":
        """Append path segments. Nested lists are flattened; a leading "/" is dropped."""
        return self._derive(url=self._url.with_segments(segments))

    def with_param(self, key: str, value: Any) -> "Plug":
        return self._derive(url=self._url.with_query([(key, value)]))

    def with_params(self, values: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None) -> "Plug":
        if values is None:
            return self._derive()
        pairs = values.items() if isinstance(values, Mapping) else values
        return self._derive(url=self._url.with_query(pairs))

    def without_param(self, key: str) -> "Plug":
        return self._derive(url=self._url.without_query(key))

    def with_header(self, key: str, value: Any) -> "Plug":
        return self.with_headers({key: value})

    def with_headers(self, values: Mapping[str, Any]) -> "Plug":
        headers = dict(self._config.headers)
        for key, value in values.items():
            headers[key] = str(value)
        return self._derive(headers=MappingProxyType(headers))

    def without_header(self, key: str) -> "Plug":
        lowered = key.lower()
        headers = {name: value for name, value in self._config.headers.items() if name.lower() != lowered}
        return self._derive(headers=MappingProxyType(headers))

    def with_follow_redirects(self) -> "Plug":
        return self._derive(follow_redirects=True)

    def without_follow_redirects(self) -> "Plug":
        return self._derive(follow_redirects=False)

    def with_timeout(self, seconds: float | None) -> "Plug":
        return self._derive(timeout=seconds)

    def with_http_client(self, client: AbstractHttpClient | None) -> "Plug":
        return self._derive(http_client=client)

    async def get(self, method: str = HTTP_METHOD.GET) -> HttpResponse:
        return await self._execute(self._build_request(method))

    async def post(
        self,
        body: RequestBody = None,
        mime: str | None = None,
        method: str = HTTP_METHOD.POST,
        *,
        progress: ProgressInfo | None = None,
    ) -> HttpResponse:
        return await self._execute(self._build_request(method, body=body, mime=mime, progress=progress))

    async def put(
        self,
        body: RequestBody = None,
        mime: str | None = None,
        *,
        progress: ProgressInfo | None = None,
    ) -> HttpResponse:
        return await self.post(body, mime, HTTP_METHOD.PUT, progress=progress)

    async def head(self) -> HttpResponse:
        return await self.get(HTTP_METHOD.HEAD)

    async def options(self) -> HttpResponse:
        return await self.get(HTTP_METHOD.OPTIONS)

    async def delete(self) -> HttpResponse:
        return await self.post(None, None, HTTP_METHOD.DELETE)

    def _build_request(
        self,
        method: str,
        *,
        body: RequestBody = None,
        mime: str | None = None,
        progress: ProgressInfo | None = None,
    ) -> RequestDescriptor:
        headers = dict(self._config.headers)
        if mime:
            headers["Content-Type"] = mime
        request = RequestDescriptor(
            url=self.url,
            method=method,
            headers=headers,
            body=body,
            progress=progress,
        )
        return self._config.before_request(request)

    @asynccontextmanager
    async def _client(self) -> AsyncIterator[AbstractHttpClient]:
        if self._config.http_client is not None:
            yield self._config.http_client
            return
        # No shared client injected: open one for this call only.
        from deki.app.infrastructure.http.factory import create_http_client

        client = create_http_client(max_redirects=self._config.max_redirects)
        try:
            yield client
        finally:
            await client.close()

    async def _execute(self, request: RequestDescriptor) -> HttpResponse:
        config = self._config
        async with self._client() as client:
            if request.progress is not None:
                upload = UploadTransport(
                    client,
                    cookie_manager=config.cookie_manager,
                    timeout=config.timeout,
                    chunk_size=config.upload_chunk_size,
                )
                return await upload.execute(request)
            transport = Transport(
                client,
                cookie_manager=config.cookie_manager,
                follow_redirects=config.follow_redirects,
                max_redirects=config.max_redirects,
                timeout=config.timeout,
            )
            return await transport.execute(request)
