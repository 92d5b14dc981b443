from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Dict, Optional, Type

from httpx import codes

from presto_stream.client import AsyncClient
from presto_stream.client.constants import (
    HEADER_CATALOG,
    HEADER_SCHEMA,
    HEADER_SESSION,
    HEADER_TIME_ZONE,
)
from presto_stream.client.response import (
    ApiResponse,
    decode_response,
    updated_session,
)
from presto_stream.common.constants import DEFAULT_HIGH_WATER_MARK
from presto_stream.common.settings import Settings
from presto_stream.model.query_results import parse_query_results
from presto_stream.statement import Statement
from presto_stream.utils.exception import (
    ProtocolError,
    UsageError,
    error_from_response,
)
from presto_stream.utils.urls import (
    CLUSTER_URL,
    FAILED_NODES_URL,
    NODES_URL,
    QUERY_URL,
    STATEMENT_URL,
)
from presto_stream.utils.util import build_base_url, prune_dict

logger = logging.getLogger(__name__)


class PrestoClient:
    """
    Client for submitting queries to a Presto coordinator.

    Statements created by the client share its HTTP connection pool, so the
    client should be closed only after its statements were consumed. It is
    intended to be used as an async context manager:
    >>> async with PrestoClient(Settings(catalog="hive", schema="default")) as client:
    >>>     statement = await client.execute("SELECT 1")
    >>>     async for line in statement:
    >>>         ...

    Args:
        settings (Optional[Settings]): Client settings. Read from environment
            variables if not provided
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.json_codec = self.settings.json_codec
        password = self.settings.password
        self._http_client = AsyncClient(
            base_url=build_base_url(
                self.settings.host, self.settings.port, self.settings.ssl
            ),
            user=self.settings.user,
            password=password.get_secret_value() if password else None,
            source=self.settings.source,
            verify=self.settings.verify,
            timeout=self.settings.timeout,
        )

    @property
    def base_url(self) -> str:
        # httpx keeps a trailing slash on base URL
        return str(self._http_client.base_url).rstrip("/")

    async def request(
        self,
        method: str,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        content: Optional[str] = None,
        session: Optional[str] = None,
    ) -> ApiResponse:
        """Send a request to the coordinator and buffer its response.

        Client default headers (user agent, user, source), basic auth and the
        503 retry are applied by the underlying HTTP client.

        Args:
            method (str): HTTP method
            url (str): Absolute URL or path relative to the coordinator
            headers (Optional[Dict[str, str]]): Per-request headers
            content (Optional[str]): Request body
            session (Optional[str]): Session token

        Returns:
            ApiResponse: Decoded response
        """
        request_headers = dict(headers or {})
        if session:
            request_headers[HEADER_SESSION] = session
        response = await self._http_client.request(
            method, url, headers=request_headers, content=content
        )
        return decode_response(response, self.json_codec)

    async def execute(
        self,
        query: str,
        catalog: Optional[str] = None,
        schema: Optional[str] = None,
        timezone: Optional[str] = None,
        session: Optional[str] = None,
        object_mode: Optional[bool] = None,
        high_water_mark: Optional[int] = None,
        fetch_info: bool = False,
    ) -> Statement:
        """Submit a query for execution.

        Args:
            query (str): SQL query
            catalog (Optional[str]): Catalog, overrides the client default
            schema (Optional[str]): Schema, overrides the client default
            timezone (Optional[str]): Session time zone
            session (Optional[str]): Session token
            object_mode (Optional[bool]): Produce records instead of CSV text,
                overrides the client default
            high_water_mark (Optional[int]): Statement output buffer size
            fetch_info (bool): Fetch query info once the query has finished

        Returns:
            Statement: Result stream of the submitted query

        Raises:
            UsageError: Missing query, catalog or schema
            QueryError: Coordinator rejected the query
            ProtocolError: Unexpected response from the coordinator
        """
        if not query or not query.strip():
            raise UsageError("query not specified")
        catalog = catalog or self.settings.catalog
        schema = schema or self.settings.schema
        if not catalog:
            raise UsageError("catalog not specified")
        if not schema:
            raise UsageError("schema not specified")
        if high_water_mark is None:
            high_water_mark = DEFAULT_HIGH_WATER_MARK
        if high_water_mark < 1:
            raise UsageError("high_water_mark must be positive")

        headers = prune_dict(
            {
                HEADER_CATALOG: catalog,
                HEADER_SCHEMA: schema,
                HEADER_TIME_ZONE: timezone,
            }
        )
        response = await self.request(
            "POST", STATEMENT_URL, headers=headers, content=query, session=session
        )
        data = response.data
        if response.status_code != codes.OK or (
            isinstance(data, dict) and data.get("error")
        ):
            raise error_from_response(response.status_code, data, "execution error")
        for field, description in (
            ("id", "query id"),
            ("nextUri", "nextUri"),
            ("infoUri", "infoUri"),
        ):
            if not isinstance(data, dict) or not data.get(field):
                raise ProtocolError(
                    f"{description} missing in response for POST {STATEMENT_URL}",
                    response.status_code,
                    data,
                )
        results = parse_query_results(
            response.status_code, data, f"POST {STATEMENT_URL}"
        )
        logger.info("Query %s submitted", results.id)
        assert results.next_uri is not None  # type check
        return Statement(
            self,
            results.id,
            results.next_uri,
            object_mode=(
                self.settings.object_mode if object_mode is None else object_mode
            ),
            fetch_info=fetch_info,
            poll_interval=self.settings.poll_interval,
            high_water_mark=high_water_mark,
            session=updated_session(response.headers, session),
        )

    async def status(self, query_id: str) -> Any:
        """Get status info of a query.

        Raises:
            ProtocolError: Coordinator returned an error
        """
        response = await self.request("GET", QUERY_URL.format(query_id=query_id))
        if response.status_code != codes.OK:
            raise error_from_response(
                response.status_code, response.data, "status info api returns error"
            )
        return response.data

    async def kill(self, query_id: str) -> None:
        """Kill a running query.

        Raises:
            ProtocolError: Coordinator did not confirm the kill
        """
        response = await self.request("DELETE", QUERY_URL.format(query_id=query_id))
        if response.status_code != codes.NO_CONTENT:
            raise error_from_response(
                response.status_code, response.data, "query kill api returns error"
            )
        logger.info("Query %s killed", query_id)

    async def nodes(self, failed: bool = False) -> Any:
        """List worker nodes.

        Args:
            failed (bool): List only failed nodes

        Raises:
            ProtocolError: Coordinator returned an error
        """
        response = await self.request("GET", FAILED_NODES_URL if failed else NODES_URL)
        if response.status_code != codes.OK:
            raise error_from_response(
                response.status_code, response.data, "node list api returns error"
            )
        return response.data

    async def cluster(self) -> Any:
        """Get cluster status.

        Raises:
            ProtocolError: Coordinator returned an error
        """
        response = await self.request("GET", CLUSTER_URL)
        if response.status_code != codes.OK:
            raise error_from_response(
                response.status_code, response.data, "cluster api returns error"
            )
        return response.data

    async def close(self) -> None:
        await self._http_client.aclose()

    async def __aenter__(self) -> PrestoClient:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()
