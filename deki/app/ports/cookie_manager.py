"""Cookie manager port: the host application owns cookie storage.

Both operations may be invoked concurrently from several in-flight calls;
implementations are responsible for their own consistency.
"""
from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class CookieManager(Protocol):
    async def get_cookie_string(self, url: str) -> str:
        """Return the ``Cookie`` header value to send to ``url`` ("" for none)."""
        ...

    async def store_cookies(self, url: str, cookies: Sequence[str]) -> None:
        """Persist raw ``Set-Cookie`` values received from ``url``."""
        ...
