"""Unit tests for Plug: URL composition, immutability and request building."""
from __future__ import annotations

import pytest

from deki.app.domain.plug import Plug, PlugConfig, encode_query_value, stringify_query_value
from deki.app.errors import ConstructionError
from deki.app.ports.http_client import ProgressInfo, RequestDescriptor

from tests.fakes import FakeHttpClient, FakeResponse, HOST


def test_at_appends_segments_and_keeps_receiver_unchanged():
    root = Plug(HOST)
    pages = root.at("@api", "deki", "pages", 12)

    assert pages.url == f"{HOST}/@api/deki/pages/12"
    assert pages.segments == ("@api", "deki", "pages", "12")
    assert root.url == f"{HOST}/"


def test_at_flattens_nested_lists_and_drops_leading_slash():
    plug = Plug(HOST).at(["a", ["b", "c"]], "/d")

    assert plug.path == "/a/b/c/d"


def test_at_joins_onto_trailing_slash_base_path():
    assert Plug(f"{HOST}/base/").at("child").path == "/base/child"


def test_at_encodes_segments_but_keeps_pre_encoded_ids():
    plug = Plug(HOST).at("a b", "=Foo%252fBar")

    assert plug.path == "/a%20b/=Foo%252fBar"


def test_at_keeps_slashes_inside_a_segment():
    assert Plug(HOST).at("a/b", "c").path == "/a/b/c"
    assert Plug(HOST).at("@api/deki", "pages").path == "/@api/deki/pages"
    assert Plug(HOST).at("@api/deki", "pages").segments == ("@api", "deki", "pages")


def test_query_values_use_form_encoding():
    plug = Plug(f"{HOST}/").with_param("q", " +")

    assert plug.url == f"{HOST}/?q=+%2B"


def test_repeated_params_keep_insertion_order():
    plug = Plug(f"{HOST}/?a=1").with_param("b", 2).with_param("a", 3)

    assert plug.url == f"{HOST}/?a=1&b=2&a=3"
    assert plug.query == (("a", "1"), ("b", "2"), ("a", "3"))


def test_without_param_removes_every_occurrence():
    plug = Plug(HOST).with_params({"a": 1, "b": 2}).with_param("a", 3).without_param("a")

    assert plug.query == (("b", "2"),)


def test_with_params_accepts_none_and_pairs():
    plug = Plug(HOST)

    assert plug.with_params(None).url == plug.url
    assert plug.with_params([("x", "1"), ("x", "2")]).query == (("x", "1"), ("x", "2"))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (True, "true"),
        (False, "false"),
        (None, ""),
        (["groups", "properties"], "groups,properties"),
        (42, "42"),
    ],
)
def test_stringify_query_value(value, expected):
    assert stringify_query_value(value) == expected


def test_encode_query_value_escapes_reserved_characters():
    assert encode_query_value("a&b=c,d/e") == "a%26b%3Dc%2Cd%2Fe"


def test_config_query_is_applied_to_the_url():
    plug = Plug(HOST, PlugConfig(query=(("dream.out.format", "json"),)))

    assert plug.url == f"{HOST}/?dream.out.format=json"


def test_headers_are_copy_on_write():
    base = Plug(HOST).with_header("X-One", "1")
    more = base.with_headers({"X-Two": 2})
    fewer = more.without_header("x-one")

    assert base.headers == {"X-One": "1"}
    assert more.headers == {"X-One": "1", "X-Two": "2"}
    assert fewer.headers == {"X-Two": "2"}


def test_headers_property_returns_a_copy():
    plug = Plug(HOST).with_header("X-One", "1")
    plug.headers["X-One"] = "changed"

    assert plug.headers == {"X-One": "1"}


def test_config_headers_are_read_only():
    base = Plug(HOST, PlugConfig(headers={"X-One": "1"}))
    derived = base.with_header("X-Two", "2")

    with pytest.raises(TypeError):
        base.config.headers["X-One"] = "changed"  # type: ignore[index]
    with pytest.raises(TypeError):
        derived.without_header("X-One").config.headers["X-Three"] = "3"  # type: ignore[index]
    with pytest.raises(TypeError):
        PlugConfig().headers["X-One"] = "1"  # type: ignore[index]

    assert base.headers == {"X-One": "1"}
    assert derived.headers == {"X-One": "1", "X-Two": "2"}


def test_follow_redirect_and_timeout_toggles():
    plug = Plug(HOST)

    assert plug.following_redirects is True
    assert plug.without_follow_redirects().following_redirects is False
    assert plug.without_follow_redirects().with_follow_redirects().following_redirects is True
    assert plug.with_timeout(2.5).timeout == 2.5
    assert plug.timeout is None


@pytest.mark.parametrize("url", ["", "not a url", "/relative/path", "http://host:99999/"])
def test_invalid_url_raises_construction_error(url):
    with pytest.raises(ConstructionError):
        Plug(url)


def test_construction_error_is_a_value_error():
    with pytest.raises(ValueError):
        Plug("")


@pytest.mark.asyncio
async def test_get_sends_request_through_injected_client():
    client = FakeHttpClient([FakeResponse(200)])
    plug = Plug(HOST).at("pages").with_header("X-One", "1").with_http_client(client)

    response = await plug.get()

    assert response.status_code == 200
    assert len(client.sent) == 1
    sent = client.sent[0]
    assert sent.request.method == "GET"
    assert sent.request.url == f"{HOST}/pages"
    assert sent.request.headers == {"X-One": "1"}
    assert sent.follow_redirects is True
    assert client.closed is False


@pytest.mark.asyncio
async def test_post_sets_content_type_and_body():
    client = FakeHttpClient([FakeResponse(200)])
    plug = Plug(HOST).with_http_client(client)

    await plug.post("<user/>", "application/xml")

    request = client.sent[0].request
    assert request.method == "POST"
    assert request.body == "<user/>"
    assert request.headers["Content-Type"] == "application/xml"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("call", "method"),
    [
        (lambda plug: plug.put("x"), "PUT"),
        (lambda plug: plug.head(), "HEAD"),
        (lambda plug: plug.options(), "OPTIONS"),
        (lambda plug: plug.delete(), "DELETE"),
        (lambda plug: plug.get("PATCH"), "PATCH"),
    ],
)
async def test_verb_helpers_use_expected_method(call, method):
    client = FakeHttpClient([FakeResponse(200)])

    await call(Plug(HOST).with_http_client(client))

    assert client.sent[0].request.method == method


@pytest.mark.asyncio
async def test_before_request_hook_rewrites_outgoing_request():
    def add_token(request: RequestDescriptor) -> RequestDescriptor:
        return RequestDescriptor(
            url=request.url,
            method=request.method,
            headers={**request.headers, "X-Deki-Token": "secret"},
            body=request.body,
        )

    client = FakeHttpClient([FakeResponse(200)])
    plug = Plug(HOST, PlugConfig(before_request=add_token, http_client=client))

    await plug.get()

    assert client.sent[0].request.headers == {"X-Deki-Token": "secret"}


@pytest.mark.asyncio
async def test_timeout_is_passed_to_client():
    client = FakeHttpClient([FakeResponse(200)])

    await Plug(HOST).with_timeout(3).with_http_client(client).get()

    assert client.sent[0].timeout == 3


@pytest.mark.asyncio
async def test_progress_hint_routes_through_upload_path():
    events = []
    client = FakeHttpClient([FakeResponse(200)])
    plug = Plug(HOST, PlugConfig(upload_chunk_size=1024, http_client=client))

    await plug.put(b"0123456789", "text/plain", progress=ProgressInfo(size=10, callback=events.append))

    sent = client.sent[0]
    assert sent.follow_redirects is False
    assert sent.chunk_size == 1024
    assert events[0].loaded == 0
    assert events[-1].loaded == 10
