import logging
from random import uniform
from typing import Any, Optional

from anyio import sleep
from httpx import AsyncClient as HttpxAsyncClient
from httpx import BasicAuth, Request, Response, codes

from presto_stream.client.constants import (
    HEADER_SOURCE,
    HEADER_USER,
    RETRY_DELAY_MAX,
    RETRY_DELAY_MIN,
    USER_AGENT,
)
from presto_stream.client.hooks import log_request, log_response

logger = logging.getLogger(__name__)


class AsyncClient(HttpxAsyncClient):
    """An HTTP client, based on httpx.AsyncClient.

    Adds identification headers to every request, applies HTTP Basic
    authentication when a password is provided and transparently retries
    requests the coordinator rejects with ``503 Service Unavailable``.

    Args:
        user (Optional[str]): User name, sent in ``X-Presto-User`` header
        password (Optional[str]): Password. Enables basic auth if set
            together with user
        source (Optional[str]): Query source, sent in ``X-Presto-Source`` header
    """

    def __init__(
        self,
        *args: Any,
        user: Optional[str] = None,
        password: Optional[str] = None,
        source: Optional[str] = None,
        **kwargs: Any,
    ):
        if user and password:
            kwargs["auth"] = BasicAuth(user, password)
        kwargs.setdefault(
            "event_hooks", {"request": [log_request], "response": [log_response]}
        )
        super().__init__(*args, **kwargs)
        # httpx sets its own user agent by default
        self.headers["User-Agent"] = USER_AGENT
        if user:
            self.headers[HEADER_USER] = user
        if source:
            self.headers[HEADER_SOURCE] = source

    async def send(self, request: Request, *args: Any, **kwargs: Any) -> Response:
        """Send a request, retrying it for as long as the server is unavailable.

        Each retry is delayed by a random interval between
        ``RETRY_DELAY_MIN`` and ``RETRY_DELAY_MAX`` seconds so that
        concurrent statements don't hit the coordinator in lockstep.
        """
        response = await super().send(request, *args, **kwargs)
        while response.status_code == codes.SERVICE_UNAVAILABLE:
            await response.aclose()
            delay = uniform(RETRY_DELAY_MIN, RETRY_DELAY_MAX)
            logger.debug(
                "%s %s - Service unavailable, retrying in %.3f seconds",
                request.method,
                request.url,
                delay,
            )
            await sleep(delay)
            response = await super().send(request, *args, **kwargs)
        return response
