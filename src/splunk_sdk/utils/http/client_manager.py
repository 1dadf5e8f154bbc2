"""HTTP client construction helpers.

This module builds the ``httpx.AsyncClient`` owned by each
:class:`~splunk_sdk.context.Context`. Every context gets its own
client; it is released when the context is closed. Timeouts and
connection limits have package-wide defaults that callers can
override.
"""

import logging
import os
from typing import Any, Dict, Optional, Type

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=5.0)
DEFAULT_LIMITS = httpx.Limits(
    max_keepalive_connections=10,
    max_connections=20,
    keepalive_expiry=30.0,
)


def create_client(
    timeout: Optional[httpx.Timeout] = None,
    limits: Optional[httpx.Limits] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    client_class: Optional[Type[httpx.AsyncClient]] = None,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """Create an HTTP client with the package defaults.

    HTTP/2 is enabled when ``http2=True`` is passed or the
    ``HTTP_ENABLE_HTTP2`` environment variable is ``true`` and the
    ``h2`` package is importable.

    :param timeout: Optional custom timeout configuration
    :type timeout: Optional[httpx.Timeout]
    :param limits: Optional custom connection limits
    :type limits: Optional[httpx.Limits]
    :param transport: Optional transport, e.g. ``httpx.MockTransport``
    :type transport: Optional[httpx.AsyncBaseTransport]
    :param client_class: Client class to instantiate
    :type client_class: Optional[Type[httpx.AsyncClient]]
    :param **kwargs: Additional client configuration options
    :return: A new client; the caller owns it and must close it
    :rtype: httpx.AsyncClient
    """
    http2_flag = kwargs.pop("http2", None)
    if http2_flag is None:
        http2_flag = os.getenv("HTTP_ENABLE_HTTP2", "false").lower() == "true"
    if http2_flag:
        try:
            import h2  # type: ignore  # noqa: F401
        except ImportError:
            logger.warning(
                "HTTP/2 requested but 'h2' package not installed; falling back to HTTP/1.1"
            )
            http2_flag = False

    client_config: Dict[str, Any] = {
        "timeout": timeout or DEFAULT_TIMEOUT,
        "limits": limits or DEFAULT_LIMITS,
        "http2": http2_flag,
        **kwargs,
    }
    if transport is not None:
        client_config["transport"] = transport

    actual_client_class = client_class or httpx.AsyncClient
    client = actual_client_class(**client_config)
    logger.debug("Created new %s client", actual_client_class.__name__)
    return client


def create_timeout(
    connect: float = 5.0,
    read: float = 30.0,
    write: float = 10.0,
    pool: float = 5.0,
) -> httpx.Timeout:
    """Create a timeout configuration object.

    :param connect: Connection timeout in seconds
    :type connect: float
    :param read: Read timeout in seconds
    :type read: float
    :param write: Write timeout in seconds
    :type write: float
    :param pool: Pool timeout in seconds
    :type pool: float
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(connect=connect, read=read, write=write, pool=pool)


def create_limits(
    max_keepalive_connections: int = 10,
    max_connections: int = 20,
    keepalive_expiry: float = 30.0,
) -> httpx.Limits:
    """Create a connection limits configuration object.

    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param keepalive_expiry: Keepalive connection expiry time in seconds
    :type keepalive_expiry: float
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    return httpx.Limits(
        max_keepalive_connections=max_keepalive_connections,
        max_connections=max_connections,
        keepalive_expiry=keepalive_expiry,
    )
