"""Transport for the Splunk REST API.

A :class:`Context` knows how to reach one Splunk server: it builds
request URIs, logs in, issues GET requests and hands back either the
parsed XML document or a raw byte stream. It owns its HTTP client and
must be closed, preferably with ``async with``::

    async with Context(Protocol.HTTPS, "localhost", 8089) as context:
        await context.login("admin", "changeme")
        document = await context.get_document(
            Namespace(owner="nobody", app="search"),
            ResourceName.of("saved", "searches"),
        )

URIs come in two forms. Global resources live under
``/services/<segments>``; namespaced resources under
``/servicesNS/<owner>/<app>/<segments>``. Each segment is
percent-escaped on its own, so a ``/`` inside a title never splits it.
"""

import logging
from contextlib import asynccontextmanager
from enum import IntEnum
from typing import Any, AsyncIterator, Iterable, Mapping, Optional, Tuple, Union
from urllib.parse import quote

import httpx
from lxml import etree

from .config.settings import Settings
from .exceptions import ArgumentError, RequestError, UnimplementedError
from .models.atom import local_name, parse_document
from .models.namespace import Namespace, ResourceName
from .utils.http import create_client, create_timeout
from .utils.http_client import SessionClient

logger = logging.getLogger(__name__)

ResourceLike = Union[ResourceName, Iterable[str]]


class Protocol(IntEnum):
    """Protocol used to reach the management port; indexes :data:`SCHEMES`."""

    HTTP = 0
    HTTPS = 1


SCHEMES = ("http", "https")


def _escape(value: Any) -> str:
    return quote(str(value), safe="")


class Context:
    """Client-side connection to one Splunk server.

    :param protocol: Protocol used to communicate with ``host``
    :type protocol: Protocol
    :param host: DNS name of a Splunk server instance
    :type host: str
    :param port: Management port of ``host``
    :type port: int
    :param transport: Optional httpx transport (e.g. ``httpx.MockTransport``)
    :type transport: Optional[httpx.AsyncBaseTransport]
    :param timeout: Optional timeout configuration
    :type timeout: Optional[httpx.Timeout]
    :param limits: Optional connection limits
    :type limits: Optional[httpx.Limits]
    :param verify: Verify the server certificate over https
    :type verify: bool
    :param credentials: Optional ``(username, password)``; when given,
                        entering the context logs in with them
    :type credentials: Optional[Tuple[str, str]]
    """

    def __init__(
        self,
        protocol: Protocol = Protocol.HTTPS,
        host: str = "localhost",
        port: int = 8089,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[httpx.Timeout] = None,
        limits: Optional[httpx.Limits] = None,
        verify: bool = True,
        credentials: Optional[Tuple[str, str]] = None,
    ):
        self.protocol = Protocol(protocol)
        self.host = host
        self.port = port
        self._credentials = credentials
        self._client: SessionClient = create_client(
            timeout=timeout,
            limits=limits,
            transport=transport,
            client_class=SessionClient,
            verify=verify,
        )

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, **kwargs: Any
    ) -> "Context":
        """Create a context from configuration.

        When ``SPLUNK_USERNAME`` and ``SPLUNK_PASSWORD`` are both set,
        entering the context with ``async with`` logs in with them.

        :param settings: Settings to use; read from the environment if omitted
        :type settings: Optional[Settings]
        :param kwargs: Extra keyword arguments for the constructor
        :return: A new context
        :rtype: Context
        """
        settings = settings or Settings()
        kwargs.setdefault(
            "timeout",
            create_timeout(connect=settings.connect_timeout, read=settings.read_timeout),
        )
        kwargs.setdefault("verify", settings.verify_ssl)
        if settings.has_credentials:
            kwargs.setdefault("credentials", (settings.username, settings.password))
        elif settings.username or settings.password:
            logger.warning(
                "Ignoring partial Splunk credentials: both username and password are required"
            )
        return cls(
            Protocol(SCHEMES.index(settings.scheme)),
            settings.host,
            settings.port,
            **kwargs,
        )

    @property
    def scheme(self) -> str:
        return SCHEMES[self.protocol]

    @property
    def session_key(self) -> Optional[str]:
        """The session key; ``None`` until :meth:`login` succeeds."""
        return self._client.session_key

    async def __aenter__(self) -> "Context":
        if self._credentials is not None and self.session_key is None:
            try:
                await self.login(*self._credentials)
            except BaseException:
                await self.aclose()
                raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release the HTTP client owned by this context."""
        await self._client.aclose()
        logger.debug("Closed HTTP client for %s", self)

    def __str__(self) -> str:
        return f"{self.scheme}://{self.host}:{self.port}"

    def __repr__(self) -> str:
        return f"Context({self})"

    async def login(self, username: str, password: str) -> str:
        """Authenticate and store the session key for later requests.

        Uses the ``auth/login`` endpoint. The returned session key is
        also available as :attr:`session_key`.

        :param username: Splunk account name
        :type username: str
        :param password: Password of ``username``
        :type password: str
        :return: The session key
        :rtype: str
        :raises RequestError: If the server rejects the credentials or
                              the response carries no session key
        """
        url = self.create_uri(None, ("auth", "login"))
        logger.info("Logging in to %s as %s", self, username)

        response = await self._client.post(
            url, content=f"username={username}\npassword={password}"
        )
        if not response.is_success:
            raise RequestError(
                response.status_code, response.reason_phrase, details=response.text
            )

        document = self._parse(response)
        element = next(
            (
                el
                for el in document.iter()
                if isinstance(el.tag, str) and local_name(el) == "sessionKey"
            ),
            None,
        )
        if element is None or not (element.text or "").strip():
            raise RequestError(
                response.status_code,
                "Response contains no session key",
                details=response.text,
            )

        self._client.session_key = element.text.strip()
        logger.info("Logged in to %s as %s", self, username)
        return self._client.session_key

    async def get_document(
        self,
        namespace: Optional[Namespace],
        resource: ResourceLike,
        params: Optional[Mapping[str, Any]] = None,
    ) -> etree._Element:
        """GET a resource and parse the response as XML.

        :param namespace: Namespace of the resource, or ``None`` for the
                          global ``/services`` form
        :type namespace: Optional[Namespace]
        :param resource: Path segments of the resource
        :type resource: ResourceLike
        :param params: Optional query parameters
        :type params: Optional[Mapping[str, Any]]
        :return: Root element of the response document
        :rtype: etree._Element
        :raises RequestError: On a non-success status, a 204 response, or
                              a body that is not well-formed XML
        """
        url = self.create_uri(namespace, resource, params)
        response = await self._client.get(url)
        if not response.is_success:
            raise RequestError(
                response.status_code, response.reason_phrase, details=response.text
            )
        if response.status_code == httpx.codes.NO_CONTENT:
            raise RequestError(response.status_code, response.reason_phrase)
        return self._parse(response)

    @asynccontextmanager
    async def get_document_stream(
        self,
        namespace: Optional[Namespace],
        resource: ResourceLike,
        params: Optional[Mapping[str, Any]] = None,
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """GET a resource and yield its body as an unbuffered byte stream.

        Use it for payloads too large to parse in memory::

            async with context.get_document_stream(None, ("search", "jobs", sid, "results")) as chunks:
                async for chunk in chunks:
                    sink.write(chunk)

        :raises RequestError: On a non-success status, before anything
                              is yielded
        """
        url = self.create_uri(namespace, resource, params)
        async with self._client.stream("GET", url) as response:
            if not response.is_success:
                await response.aread()
                raise RequestError(
                    response.status_code, response.reason_phrase, details=response.text
                )
            yield response.aiter_bytes()

    def post(self, namespace: Optional[Namespace], resource: ResourceLike, *args, **kwargs):
        """POST to a resource. Not available yet.

        :raises UnimplementedError: Always
        """
        raise UnimplementedError("Context.post")

    def create_uri(
        self,
        namespace: Optional[Namespace],
        resource: ResourceLike,
        params: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Build the absolute URI of a resource.

        :param namespace: Namespace, or ``None`` for a global resource
        :type namespace: Optional[Namespace]
        :param resource: Path segments of the resource
        :type resource: ResourceLike
        :param params: Optional query parameters, in order
        :type params: Optional[Mapping[str, Any]]
        :return: The URI, with every segment and parameter escaped
        :rtype: str
        :raises ArgumentError: If ``resource`` is a plain string
        """
        if isinstance(resource, (str, bytes)):
            raise ArgumentError(
                f"resource must be a sequence of path segments, not {resource!r}",
                argument="resource",
            )
        if namespace is None:
            segments = ["services"]
        else:
            segments = ["servicesNS", namespace.owner, namespace.app]
        segments.extend(resource)

        uri = f"{self}/" + "/".join(_escape(segment) for segment in segments)
        if params:
            uri += "?" + "&".join(
                f"{_escape(key)}={_escape(value)}" for key, value in params.items()
            )
        return uri

    @staticmethod
    def _parse(response: httpx.Response) -> etree._Element:
        if not response.content.strip():
            raise RequestError(response.status_code, "Malformed response body")
        try:
            return parse_document(response.content)
        except etree.XMLSyntaxError as exc:
            logger.debug("Unparsable body from %s: %s", response.url, exc)
            raise RequestError(
                response.status_code, "Malformed response body", details=response.text
            ) from exc
