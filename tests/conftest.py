from __future__ import annotations

from typing import Callable

import httpx
import pytest

from deki.app.config.defaults import reset_defaults
from deki.app.infrastructure.http.factory import create_http_client
from deki.app.ports.http_client import AbstractHttpClient

from tests.fakes import FakeCookieManager


@pytest.fixture(autouse=True)
def _clean_defaults():
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture()
def cookie_manager() -> FakeCookieManager:
    return FakeCookieManager()


@pytest.fixture()
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], AbstractHttpClient]:
    """Factory: a real HttpxHttpClient whose network layer is ``httpx.MockTransport(handler)``."""

    def build(handler: Callable[[httpx.Request], httpx.Response]) -> AbstractHttpClient:
        return create_http_client(transport=httpx.MockTransport(handler))

    return build
