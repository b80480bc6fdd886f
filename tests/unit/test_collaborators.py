"""Unit tests for the resource collaborators built on Plug and the model parser."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from deki.app.application.api import Api
from deki.app.application.files import File
from deki.app.application.users import User, UserManager
from deki.app.config.defaults import configure_defaults
from deki.app.config.settings import Settings
from deki.app.constants import CONTENT_TYPE, TOKEN_HEADER
from deki.app.errors import ApiRequestError, DekiError, ValidationError

from tests.fakes import FakeHttpClient, FakeResponse, HOST

API = f"{HOST}/@api/deki"
FORMAT = "dream.out.format=json"

USER_PAYLOAD = {
    "@id": "1",
    "@href": f"{API}/users/1",
    "username": "admin",
    "email": "admin@example.com",
    "date.created": "2020-01-15T09:30:00Z",
    "license.seat": {"#text": "true", "@owner": "false"},
    "groups": {"group": {"@id": "2", "groupname": "Admins"}},
}

FILE_PAYLOAD = {
    "@id": "7",
    "@revision": "3",
    "filename": "report.txt",
    "contents": {"@type": "text/plain", "@size": "3"},
}


@pytest.fixture()
def settings() -> Settings:
    return Settings(host=HOST, token="secret")


def _sent(client: FakeHttpClient, index: int = 0):
    return client.sent[index].request


@pytest.mark.asyncio
async def test_api_probes(settings):
    client = FakeHttpClient([FakeResponse(200), FakeResponse(200)])
    api = Api(settings, http_client=client)

    await api.http()
    await api.f1()

    assert _sent(client, 0).url == f"{API}/http?{FORMAT}"
    assert _sent(client, 1).url == f"{API}/f1?{FORMAT}"


@pytest.mark.asyncio
async def test_get_current_user_parses_payload(settings):
    client = FakeHttpClient([FakeResponse(200, payload=USER_PAYLOAD)])

    user = await UserManager(settings, http_client=client).get_current_user(exclude=["groups"])

    request = _sent(client)
    assert request.url == f"{API}/users/current?{FORMAT}&exclude=groups"
    assert request.headers[TOKEN_HEADER] == "secret"
    assert request.headers["X-Deki-Client"] == "deki-client"
    assert user == {
        "id": 1,
        "href": f"{API}/users/1",
        "username": "admin",
        "email": "admin@example.com",
        "dateCreated": datetime(2020, 1, 15, 9, 30, tzinfo=timezone.utc),
        "seated": True,
        "siteOwner": False,
        "groups": [{"id": 2, "groupName": "Admins"}],
    }


@pytest.mark.asyncio
async def test_collaborators_fall_back_to_configured_defaults():
    configure_defaults(host=HOST)
    client = FakeHttpClient([FakeResponse(200, payload=USER_PAYLOAD)])

    await UserManager(http_client=client).get_current_user()

    assert _sent(client).url.startswith(f"{API}/users/current?")


@pytest.mark.asyncio
async def test_exclude_must_be_a_list_of_strings(settings):
    client = FakeHttpClient()

    with pytest.raises(ValidationError):
        await UserManager(settings, http_client=client).get_current_user(exclude="groups")  # type: ignore[arg-type]
    assert client.sent == []


@pytest.mark.asyncio
async def test_activity_token_combines_user_id_and_session(settings):
    client = FakeHttpClient(
        [FakeResponse(200, payload=USER_PAYLOAD, headers=[("X-Deki-Session", "sess-9")])]
    )

    token = await UserManager(settings, http_client=client).get_current_user_activity_token()

    assert token == "1:sess-9"
    assert _sent(client).url == f"{API}/users/current?{FORMAT}&exclude=groups%2Cproperties"


@pytest.mark.asyncio
async def test_activity_token_requires_session_header(settings):
    client = FakeHttpClient([FakeResponse(200, payload=USER_PAYLOAD)])

    with pytest.raises(DekiError):
        await UserManager(settings, http_client=client).get_current_user_activity_token()


@pytest.mark.asyncio
async def test_get_users_parses_list(settings):
    payload = {"@count": "2", "@querycount": "2", "user": [{"@id": "1"}, {"@id": "2"}]}
    client = FakeHttpClient([FakeResponse(200, payload=payload)])

    users = await UserManager(settings, http_client=client).get_users()

    assert _sent(client).url == f"{API}/users?{FORMAT}"
    assert users == {"count": 2, "queryCount": 2, "users": [{"id": 1, "groups": []}, {"id": 2, "groups": []}]}


@pytest.mark.asyncio
async def test_search_users_sends_constraints(settings):
    client = FakeHttpClient([FakeResponse(200, payload={"@count": "0"})])

    result = await UserManager(settings, http_client=client).search_users(username="bob", limit=5)

    assert _sent(client).url == f"{API}/users/search?{FORMAT}&username=bob&limit=5"
    assert result == {"count": 0, "users": []}


@pytest.mark.asyncio
async def test_search_users_rejects_wrong_types(settings):
    with pytest.raises(ValidationError):
        await UserManager(settings, http_client=FakeHttpClient()).search_users(limit="5")


@pytest.mark.asyncio
@pytest.mark.parametrize(("method", "expected"), [("GET", "GET"), ("post", "POST")])
async def test_authenticate_uses_basic_credentials(settings, method, expected):
    client = FakeHttpClient([FakeResponse(200, text="auth-token")])

    token = await UserManager(settings, http_client=client).authenticate(
        username="a", password="b", method=method
    )

    request = _sent(client)
    assert token == "auth-token"
    assert request.method == expected
    assert request.url == f"{API}/users/authenticate?{FORMAT}"
    assert request.headers["Authorization"] == "Basic YTpi"


@pytest.mark.asyncio
async def test_authenticate_rejects_unknown_method(settings):
    with pytest.raises(ValidationError):
        await UserManager(settings, http_client=FakeHttpClient()).authenticate(
            username="a", password="b", method="PATCH"
        )


def test_get_user_resolves_names(settings):
    manager = UserManager(settings, http_client=FakeHttpClient())

    assert manager.get_user("bob").resource_id == "=bob"
    assert manager.get_user(5).resource_id == 5
    assert manager.get_user().resource_id == "current"


@pytest.mark.asyncio
async def test_user_update_sends_xml_document(settings):
    client = FakeHttpClient([FakeResponse(200, payload=USER_PAYLOAD)])

    await User(1, settings, http_client=client).update(active=False, seated=True, full_name="A & B")

    request = _sent(client)
    assert request.method == "PUT"
    assert request.url == f"{API}/users/1?{FORMAT}"
    assert request.headers["Content-Type"] == CONTENT_TYPE.XML
    assert request.body == (
        "<user><status>inactive</status><license.seat>true</license.seat>"
        "<fullname>A &amp; B</fullname></user>"
    )


@pytest.mark.asyncio
async def test_user_update_translates_http_errors(settings):
    client = FakeHttpClient([FakeResponse(409, text='{"message":"name taken"}')])

    with pytest.raises(ApiRequestError) as exc_info:
        await User("bob", settings, http_client=client).update(username="alice")

    assert exc_info.value.status == 409
    assert exc_info.value.info["info"] == {"arguments": [], "message": "name taken"}


@pytest.mark.asyncio
async def test_user_update_rejects_unknown_options(settings):
    with pytest.raises(ValidationError):
        await User(1, settings, http_client=FakeHttpClient()).update(nickname="x")


@pytest.mark.asyncio
async def test_set_password_returns_auth_token(settings):
    client = FakeHttpClient([FakeResponse(200, text="new-token")])

    result = await User(settings=settings, http_client=client).set_password("new", "old")

    request = _sent(client)
    assert result == {"authToken": "new-token"}
    assert request.url == f"{API}/users/current/password?{FORMAT}&currentpassword=old"
    assert request.body == "new"
    assert request.headers["Content-Type"] == CONTENT_TYPE.TEXT


@pytest.mark.asyncio
async def test_file_info_and_revisions(settings):
    revisions = {"@count": "2", "file": [{"@id": "7", "@revision": "1"}, {"@id": "7", "@revision": "2"}]}
    client = FakeHttpClient([FakeResponse(200, payload=FILE_PAYLOAD), FakeResponse(200, payload=revisions)])
    file = File(7, settings, http_client=client)

    info = await file.get_info()
    history = await file.get_revisions()

    assert _sent(client, 0).url == f"{API}/files/7/info?{FORMAT}"
    assert _sent(client, 1).url == f"{API}/files/7/revisions?{FORMAT}"
    assert info == {
        "id": 7,
        "revision": 3,
        "filename": "report.txt",
        "contents": {"type": "text/plain", "size": 3},
    }
    assert history == {"count": 2, "files": [{"id": 7, "revision": 1}, {"id": 7, "revision": 2}]}


@pytest.mark.asyncio
async def test_file_description_and_delete(settings):
    client = FakeHttpClient([FakeResponse(200, payload=FILE_PAYLOAD), FakeResponse(200)])
    file = File(7, settings, http_client=client)

    await file.set_description("quarterly numbers")
    await file.delete()

    assert _sent(client, 0).method == "PUT"
    assert _sent(client, 0).url == f"{API}/files/7/description?{FORMAT}"
    assert _sent(client, 0).body == "quarterly numbers"
    assert _sent(client, 1).method == "DELETE"
    assert _sent(client, 1).url == f"{API}/files/7?{FORMAT}"


@pytest.mark.asyncio
async def test_add_revision_reports_progress(settings):
    events = []
    client = FakeHttpClient([FakeResponse(200, payload=FILE_PAYLOAD)], upload_chunk=2)

    parsed = await File(7, settings, http_client=client).add_revision(
        "abcde",
        name="report.txt",
        content_type="text/plain",
        progress=events.append,
    )

    sent = client.sent[0]
    assert sent.follow_redirects is False
    assert sent.request.url == f"{API}/files/7/=report.txt?{FORMAT}"
    assert sent.request.body == b"abcde"
    assert [event.loaded for event in events] == [0, 2, 4, 5, 5]
    assert parsed["id"] == 7


@pytest.mark.asyncio
async def test_add_revision_without_progress_sets_content_length(settings):
    client = FakeHttpClient([FakeResponse(200, payload=FILE_PAYLOAD)])

    await File(7, settings, http_client=client).add_revision(b"abc", name="report.txt")

    sent = client.sent[0]
    assert sent.follow_redirects is True
    assert sent.request.headers["Content-Length"] == "3"


@pytest.mark.asyncio
async def test_add_revision_requires_a_name(settings):
    with pytest.raises(ValidationError):
        await File(7, settings, http_client=FakeHttpClient()).add_revision(b"abc", name="")
