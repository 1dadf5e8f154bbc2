"""Unit tests for the Context transport.

Requests are served by ``httpx.MockTransport`` so URI construction,
headers and error mapping can be checked without a server.
"""

from typing import Callable, List

import httpx
import pytest
import pytest_asyncio

from splunk_sdk.config.settings import Settings
from splunk_sdk.context import Context, Protocol
from splunk_sdk.exceptions import ArgumentError, RequestError, UnimplementedError
from splunk_sdk.models import Namespace, ResourceName

LOGIN_OK = "<response><sessionKey>192fd3e46a31246da7ea7f109e7f95fd</sessionKey></response>"


def recording_transport(
    requests: List[httpx.Request],
    respond: Callable[[httpx.Request], httpx.Response],
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return respond(request)

    return httpx.MockTransport(handler)


@pytest.fixture
def requests() -> List[httpx.Request]:
    return []


@pytest_asyncio.fixture
async def context_factory():
    created = []

    def factory(respond, requests=None, **kwargs):
        transport = recording_transport(requests if requests is not None else [], respond)
        context = Context(Protocol.HTTPS, "splunk.example.com", 8089, transport=transport, **kwargs)
        created.append(context)
        return context

    yield factory
    for context in created:
        await context.aclose()


class TestCreateUri:
    def test_namespaced_form(self):
        context = Context(Protocol.HTTPS, "localhost", 8089)
        uri = context.create_uri(
            Namespace(owner="nobody", app="search"), ["saved", "searches"]
        )
        assert uri == "https://localhost:8089/servicesNS/nobody/search/saved/searches"

    def test_global_form_and_scheme_table(self):
        context = Context(Protocol.HTTP, "localhost", 8000)
        assert context.create_uri(None, ResourceName.of("apps", "local")) == (
            "http://localhost:8000/services/apps/local"
        )

    def test_segments_escaped_individually(self):
        context = Context(Protocol.HTTPS, "localhost", 8089)
        uri = context.create_uri(None, ["saved", "searches", "Errors in a/b"])
        assert uri.endswith("/services/saved/searches/Errors%20in%20a%2Fb")

    def test_query_parameters_escaped_in_order(self):
        context = Context(Protocol.HTTPS, "localhost", 8089)
        uri = context.create_uri(
            None, ["search", "jobs"], {"search": "search index=main", "count": 0}
        )
        assert uri.endswith("/services/search/jobs?search=search%20index%3Dmain&count=0")

    def test_str(self):
        assert str(Context(Protocol.HTTPS, "splunk.local", 8089)) == "https://splunk.local:8089"


@pytest.mark.asyncio
class TestGetDocument:
    async def test_namespaced_path_on_the_wire(self, context_factory, requests, make_entry):
        context = context_factory(lambda r: httpx.Response(200, text=make_entry()), requests)

        await context.get_document(
            Namespace(owner="nobody", app="search"), ResourceName.of("saved", "searches")
        )

        assert requests[0].method == "GET"
        assert requests[0].url.raw_path == b"/servicesNS/nobody/search/saved/searches"

    async def test_space_in_segment_is_escaped_on_the_wire(
        self, context_factory, requests, make_entry
    ):
        context = context_factory(lambda r: httpx.Response(200, text=make_entry()), requests)

        await context.get_document(None, ["saved", "searches", "my search"])

        assert requests[0].url.raw_path == b"/services/saved/searches/my%20search"

    async def test_returns_parsed_root(self, context_factory, make_entry):
        context = context_factory(lambda r: httpx.Response(200, text=make_entry()))

        document = await context.get_document(None, ["saved", "searches", "Errors"])

        assert document.tag == "{http://www.w3.org/2005/Atom}entry"

    async def test_error_status_raises_request_error(self, context_factory):
        context = context_factory(lambda r: httpx.Response(404, text="<response/>"))

        with pytest.raises(RequestError) as excinfo:
            await context.get_document(None, ["nope"])

        assert excinfo.value.status_code == 404
        assert excinfo.value.reason == "Not Found"
        assert excinfo.value.details["body"] == "<response/>"

    async def test_no_content_raises_204(self, context_factory):
        context = context_factory(lambda r: httpx.Response(204))

        with pytest.raises(RequestError) as excinfo:
            await context.get_document(None, ["search", "jobs", "1234.5"])

        assert excinfo.value.status_code == 204
        assert excinfo.value.reason == "No Content"

    async def test_malformed_body_raises(self, context_factory):
        context = context_factory(lambda r: httpx.Response(200, text="<entry><title>"))

        with pytest.raises(RequestError) as excinfo:
            await context.get_document(None, ["server", "info"])

        assert excinfo.value.status_code == 200
        assert excinfo.value.reason == "Malformed response body"

    async def test_empty_body_raises(self, context_factory):
        context = context_factory(lambda r: httpx.Response(200, text=""))

        with pytest.raises(RequestError, match="Malformed response body"):
            await context.get_document(None, ["server", "info"])


@pytest.mark.asyncio
class TestLogin:
    async def test_stores_session_key_and_uses_it(self, context_factory, requests, make_entry):
        def respond(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("auth/login"):
                return httpx.Response(200, text=LOGIN_OK)
            return httpx.Response(200, text=make_entry())

        context = context_factory(respond, requests)

        key = await context.login("admin", "changeme")
        await context.get_document(None, ["server", "info"])

        assert key == "192fd3e46a31246da7ea7f109e7f95fd"
        assert context.session_key == key
        login, follow_up = requests
        assert login.method == "POST"
        assert login.url.raw_path == b"/services/auth/login"
        assert login.content == b"username=admin\npassword=changeme"
        assert "authorization" not in login.headers
        assert follow_up.headers["authorization"] == f"Splunk {key}"

    async def test_bare_session_key_root(self, context_factory):
        context = context_factory(lambda r: httpx.Response(200, text="<sessionKey>k</sessionKey>"))
        assert await context.login("admin", "changeme") == "k"

    async def test_failure_raises_with_details(self, context_factory):
        body = '<response><messages><msg type="WARN">Login failed</msg></messages></response>'
        context = context_factory(lambda r: httpx.Response(401, text=body))

        with pytest.raises(RequestError) as excinfo:
            await context.login("admin", "wrong")

        assert excinfo.value.status_code == 401
        assert excinfo.value.reason == "Unauthorized"
        assert "Login failed" in excinfo.value.details["body"]
        assert context.session_key is None

    async def test_missing_session_key_raises(self, context_factory):
        context = context_factory(lambda r: httpx.Response(200, text="<response/>"))

        with pytest.raises(RequestError):
            await context.login("admin", "changeme")


@pytest.mark.asyncio
class TestGetDocumentStream:
    async def test_streams_bytes(self, context_factory, requests):
        context = context_factory(lambda r: httpx.Response(200, content=b"x" * 10_000), requests)

        received = b""
        async with context.get_document_stream(
            Namespace(owner="admin", app="search"), ["search", "jobs", "1.2", "results"]
        ) as chunks:
            async for chunk in chunks:
                received += chunk

        assert received == b"x" * 10_000
        assert requests[0].url.raw_path == b"/servicesNS/admin/search/search/jobs/1.2/results"

    async def test_error_before_yield(self, context_factory):
        context = context_factory(lambda r: httpx.Response(503, text="busy"))

        with pytest.raises(RequestError) as excinfo:
            async with context.get_document_stream(None, ["server", "info"]):
                pytest.fail("stream should not open")

        assert excinfo.value.status_code == 503
        assert excinfo.value.details["body"] == "busy"


def test_post_is_unimplemented():
    context = Context(Protocol.HTTPS, "localhost", 8089)
    with pytest.raises(UnimplementedError):
        context.post(None, ["saved", "searches"])
    with pytest.raises(NotImplementedError):
        context.post(Namespace(owner="nobody", app="search"), ["saved", "searches"])


def test_from_settings():
    settings = Settings(host="splunk.internal", port=9089, scheme="http", read_timeout=12.0)
    context = Context.from_settings(settings)

    assert str(context) == "http://splunk.internal:9089"
    assert context.protocol is Protocol.HTTP
    assert context._client.timeout.read == 12.0


@pytest.mark.asyncio
async def test_async_context_manager_closes_client():
    async with Context(Protocol.HTTPS, "localhost", 8089) as context:
        assert not context._client.is_closed
    assert context._client.is_closed


class TestSettingsCredentials:
    @pytest.mark.asyncio
    async def test_entering_logs_in_with_configured_credentials(self, requests):
        settings = Settings(host="splunk.internal", username="admin", password="changeme")
        transport = recording_transport(requests, lambda request: httpx.Response(200, text=LOGIN_OK))

        async with Context.from_settings(settings, transport=transport) as context:
            assert context.session_key == "192fd3e46a31246da7ea7f109e7f95fd"

        (login,) = requests
        assert login.url.path == "/services/auth/login"
        assert login.content == b"username=admin\npassword=changeme"

    @pytest.mark.asyncio
    async def test_rejected_credentials_close_the_client(self):
        settings = Settings(username="admin", password="wrong")
        transport = httpx.MockTransport(lambda request: httpx.Response(401, text="<response/>"))
        context = Context.from_settings(settings, transport=transport)

        with pytest.raises(RequestError) as excinfo:
            async with context:
                pass

        assert excinfo.value.status_code == 401
        assert context._client.is_closed

    @pytest.mark.asyncio
    async def test_no_login_without_credentials(self, requests):
        transport = recording_transport(requests, lambda request: httpx.Response(200, text=LOGIN_OK))

        async with Context.from_settings(Settings(username="admin"), transport=transport) as context:
            assert context.session_key is None

        assert requests == []


def test_plain_string_resource_rejected():
    context = Context(Protocol.HTTPS, "localhost", 8089)
    with pytest.raises(ArgumentError) as excinfo:
        context.create_uri(None, "server/info")
    assert excinfo.value.argument == "resource"
