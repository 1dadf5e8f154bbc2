"""HTTP client that carries a Splunk session key.

This module provides :class:`SessionClient`, an ``httpx.AsyncClient``
that injects the ``Authorization: Splunk <session key>`` header into
every request once a session key has been set, and removes any other
authorization header a caller may have attached.

Examples:
    >>> client = SessionClient()
    >>> client.session_key = "192fd3e46a31246da7ea7f109e7f95fd"
    >>> response = await client.get("https://localhost:8089/services/apps/local")
"""

import logging
from typing import Optional

import httpx

from .security import sanitize_headers

logger = logging.getLogger(__name__)


class SessionClient(httpx.AsyncClient):
    """HTTP client that authenticates requests with a Splunk session key.

    The session key is plain mutable state: it is written by
    ``Context.login`` and read on every send without locking.

    :param session_key: Optional initial session key
    :type session_key: Optional[str]
    """

    AUTH_SCHEME = "Splunk"

    def __init__(self, *args, session_key: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.session_key: Optional[str] = session_key

    async def send(self, request: httpx.Request, **kwargs) -> httpx.Response:
        """Single interception point for all HTTP requests.

        :param request: The HTTP request to send
        :type request: httpx.Request
        :param kwargs: Additional arguments to pass to the parent send method
        :return: The HTTP response
        :rtype: httpx.Response
        """
        if not request.extensions.get("session_injected"):
            request.extensions["session_injected"] = True
            self._inject_session(request)

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("=== SEND: %s %s", request.method, request.url)
            logger.debug("    Headers: %s", sanitize_headers(dict(request.headers)))

        response = await super().send(request, **kwargs)
        logger.debug(
            "=== RECV: %s %s -> %d", request.method, request.url, response.status_code
        )
        return response

    def _inject_session(self, request: httpx.Request) -> None:
        if "authorization" in request.headers:
            del request.headers["authorization"]
        if self.session_key:
            request.headers["Authorization"] = f"{self.AUTH_SCHEME} {self.session_key}"
