from __future__ import annotations

import logging
from collections import deque
from types import TracebackType
from typing import (
    TYPE_CHECKING,
    Any,
    Deque,
    Dict,
    List,
    Optional,
    Tuple,
    Type,
    Union,
)
from warnings import warn

from anyio import Event, Lock, move_on_after
from httpx import HTTPError, codes

from presto_stream.client.response import ApiResponse, updated_session
from presto_stream.common.constants import (
    DEFAULT_HIGH_WATER_MARK,
    DEFAULT_POLL_INTERVAL_SECONDS,
    TERMINAL_STATES,
    QueryState,
)
from presto_stream.common.json_codec import JSONCodec
from presto_stream.model.query_results import (
    Column,
    QueryResults,
    parse_query_results,
)
from presto_stream.statement.encoding import (
    deduplicate_column_names,
    to_csv_block,
    to_csv_header,
    to_record,
)
from presto_stream.statement.events import EventEmitter, QueryResult, StatementEvent
from presto_stream.utils.exception import (
    CancelError,
    InfoFetchError,
    PrestoError,
    ProtocolError,
    error_from_response,
)

if TYPE_CHECKING:
    from presto_stream.presto_client import PrestoClient

logger = logging.getLogger(__name__)

Item = Union[Dict[str, Any], str]


class Statement(EventEmitter):
    """Result cursor of a single query execution.

    Should not be created directly,
    use :py:func:`PrestoClient.execute <presto_stream.presto_client.PrestoClient>`

    A statement is an async iterator. Each pull returns a buffered item if one
    is available, otherwise it follows the chain of ``nextUri`` links until
    output is buffered or the result is exhausted. Produced items are
    ``dict`` records keyed by column name in object mode, or CSV text
    (a header line, then one multi-line block per server response) otherwise.

    Notifications are delivered to listeners registered with :py:meth:`on`,
    see :py:class:`StatementEvent <presto_stream.statement.events.StatementEvent>`.
    Errors raised while fetching are emitted as ``ERROR`` events, the first
    one is also raised from the pull once the already buffered items were
    consumed.

    Args:
        client (PrestoClient): Client the query was submitted with
        query_id (str): Query ID
        next_uri (str): First URI to fetch results from
        object_mode (bool): Produce records instead of CSV text
        fetch_info (bool): Fetch query info once the query has finished
        poll_interval (float): Seconds to wait between polls of a query
            that hasn't started producing rows
        high_water_mark (int): Number of buffered items after which fetching
            stops until they are consumed
        session (Optional[str]): Session token to send with each request
        json_codec (Optional[JSONCodec]): Codec used to serialize compound
            values in text mode. Defaults to the client codec
    """

    def __init__(
        self,
        client: PrestoClient,
        query_id: str,
        next_uri: str,
        object_mode: bool = False,
        fetch_info: bool = False,
        poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        high_water_mark: int = DEFAULT_HIGH_WATER_MARK,
        session: Optional[str] = None,
        json_codec: Optional[JSONCodec] = None,
    ):
        super().__init__()
        self._client: Optional[PrestoClient] = client
        self._query_id = query_id
        self._next_uri: Optional[str] = next_uri
        self._object_mode = object_mode
        self._fetch_info = fetch_info
        self._poll_interval = poll_interval
        self._high_water_mark = high_water_mark
        self._session = session
        self._codec = json_codec or client.json_codec

        self._state: Optional[str] = None
        self._columns: Optional[List[Column]] = None
        self._pending: Deque[Item] = deque()

        self._cancelled = False
        self._is_running = False
        self._end_of_stream = False
        self._closed = False
        # Set once the query is first seen FINISHED, stops STATE notifications
        self._rows_started = False

        self._error: Optional[BaseException] = None
        self._error_raised = False
        self._lock = Lock()
        self._wakeup: Optional[Event] = None

    @property
    def query_id(self) -> str:
        return self._query_id

    @property
    def next_uri(self) -> Optional[str]:
        return self._next_uri

    @property
    def state(self) -> Optional[str]:
        """Last query state reported by the coordinator."""
        return self._state

    @property
    def columns(self) -> Optional[List[Column]]:
        return self._columns

    @property
    def session(self) -> Optional[str]:
        return self._session

    @property
    def object_mode(self) -> bool:
        return self._object_mode

    @property
    def fetch_info(self) -> bool:
        return self._fetch_info

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def is_running(self) -> bool:
        """True while an HTTP fetch of this statement is in flight."""
        return self._is_running

    @property
    def end_of_stream(self) -> bool:
        return self._end_of_stream

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> Statement:
        return self

    async def __anext__(self) -> Item:
        async with self._lock:
            while not self._pending and not self._finished():
                await self._run()
            if self._pending:
                return self._pending.popleft()
            if self._error is not None and not self._error_raised:
                self._error_raised = True
                raise self._error
            raise StopAsyncIteration

    def _finished(self) -> bool:
        return self._end_of_stream or self._error is not None or self._closed

    async def cancel(self) -> Any:
        """Cancel the running query.

        Stops fetching: a response that arrives after this call is discarded
        and the stream ends. The query is then cancelled on the coordinator.

        Returns:
            Any: Coordinator response payload, if any

        Raises:
            CancelError: Coordinator did not confirm the cancellation
        """
        self._cancelled = True
        if self._wakeup is not None:
            self._wakeup.set()
        uri, self._next_uri = self._next_uri, None
        client = self._require_client()
        if uri is None:
            # result chain is exhausted, fall back to the query endpoint
            await client.kill(self._query_id)
            return None
        logger.debug("Cancelling query %s", self._query_id)
        response = await client.request("DELETE", uri, session=self._session)
        if response.status_code != codes.NO_CONTENT:
            raise CancelError(self._query_id, response.status_code, response.data)
        return response.data

    async def aclose(self) -> None:
        """Release the statement.

        If the query may still be running on the coordinator it is cancelled
        first. Failure to cancel is emitted as an ``ERROR`` event and raised.
        """
        if self._closed:
            return
        try:
            if self._may_be_running():
                try:
                    await self.cancel()
                except (HTTPError, PrestoError) as err:
                    self._emit(StatementEvent.ERROR, err)
                    raise
        finally:
            self._closed = True
            self._client = None
            self._next_uri = None
            self._pending.clear()

    def _may_be_running(self) -> bool:
        if self._cancelled or self._end_of_stream:
            return False
        return self._state is None or self._state not in TERMINAL_STATES

    async def __aenter__(self) -> Statement:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    def __del__(self) -> None:
        # remote cancel needs a running event loop
        if not getattr(self, "_closed", True) and self._may_be_running():
            logger.warning(
                "Statement for query %s not closed, query may still be running",
                self._query_id,
            )
            warn(f"Unclosed statement for query {self._query_id}", ResourceWarning)

    def _require_client(self) -> PrestoClient:
        if self._client is None:
            raise PrestoError(f"Statement for query {self._query_id} is closed")
        return self._client

    def _push(self, item: Item) -> bool:
        """Buffer an output item.

        Returns:
            bool: True if the consumer can accept more items right away
        """
        self._pending.append(item)
        return len(self._pending) < self._high_water_mark

    def _signal_end_of_stream(self) -> None:
        if self._end_of_stream:
            return
        self._end_of_stream = True
        self._next_uri = None
        self._emit(StatementEvent.END)

    def _report_error(self, error: BaseException) -> None:
        logger.debug("Query %s failed: %s", self._query_id, error)
        if self._error is None:
            self._error = error
        self._emit(StatementEvent.ERROR, error)

    async def _run(self) -> None:
        """Drive the poll/fetch cycle.

        Returns once the consumer has signaled back-pressure, the result
        chain has ended or an error has been reported.
        """
        if self._is_running:
            return
        while True:
            if self._cancelled or self._next_uri is None:
                self._signal_end_of_stream()
                return

            try:
                response = await self._fetch(self._next_uri)
            except ProtocolError as err:
                if self._cancelled:
                    self._signal_end_of_stream()
                else:
                    await self._fail_query(err)
                return
            except (HTTPError, PrestoError) as err:
                self._report_error(err)
                return

            # cancel() could have been called while the request was in flight
            if self._cancelled:
                self._signal_end_of_stream()
                return

            if isinstance(response.data, dict) and response.data.get("error"):
                await self._fail_query(
                    error_from_response(
                        response.status_code,
                        response.data,
                        "Attempt to retrieve next result chunk failed",
                    )
                )
                return

            try:
                results = self._parse_results(response)
            except ProtocolError as err:
                await self._fail_query(err)
                return

            self._session = updated_session(response.headers, self._session)
            self._track_state(results)

            if self._is_polling(results):
                self._next_uri = results.next_uri
                await self._wait_poll_interval()
                continue

            can_push = True
            if results.columns is not None and self._columns is None:
                can_push = self._resolve_columns(results.columns)
            if results.data:
                try:
                    can_push = self._push_rows(results.data)
                except ProtocolError as err:
                    await self._fail_query(err)
                    return

            if results.next_uri:
                self._next_uri = results.next_uri
                if can_push:
                    continue
                return

            self._signal_end_of_stream()
            await self._report_success(results)
            return

    async def _fetch(self, uri: str) -> ApiResponse:
        client = self._require_client()
        self._is_running = True
        try:
            return await client.request("GET", uri, session=self._session)
        finally:
            self._is_running = False

    def _parse_results(self, response: ApiResponse) -> QueryResults:
        if response.status_code != codes.OK:
            raise error_from_response(
                response.status_code,
                response.data,
                f"Fetching results of query {self._query_id} failed",
            )
        return parse_query_results(
            response.status_code, response.data, f"query {self._query_id} results"
        )

    def _is_polling(self, results: QueryResults) -> bool:
        state = results.state
        return (
            state is not None
            and state.is_polling()
            and results.data is None
            and results.next_uri is not None
        )

    def _track_state(self, results: QueryResults) -> None:
        if self.listener_count(StatementEvent.STATE) > 0 and not self._rows_started:
            self._emit(StatementEvent.STATE, results.id, results.stats)
        state = results.raw_state
        if state != self._state:
            logger.debug(
                "Query %s state changed: %s -> %s", self._query_id, self._state, state
            )
            self._state = state
            if state == QueryState.FINISHED:
                self._rows_started = True
            self._emit(StatementEvent.STATE_CHANGE, results.id, results.stats)

    def _resolve_columns(self, columns: List[Column]) -> bool:
        self._columns = columns
        if self._object_mode:
            deduplicate_column_names(columns)
            self._emit(StatementEvent.COLUMNS, columns)
            return True
        self._emit(StatementEvent.COLUMNS, columns)
        return self._push(to_csv_header(columns, self._codec))

    def _push_rows(self, rows: List[List[Any]]) -> bool:
        if not self._object_mode:
            return self._push(to_csv_block(rows, self._codec))
        if self._columns is None:
            raise ProtocolError(
                f"Query {self._query_id} returned rows before columns", data=rows
            )
        names = [column.name for column in self._columns]
        can_push = True
        for row in rows:
            can_push = self._push(to_record(names, row))
        return can_push

    async def _wait_poll_interval(self) -> None:
        if self._wakeup is None:
            self._wakeup = Event()
        with move_on_after(self._poll_interval):
            await self._wakeup.wait()

    async def _fail_query(self, error: ProtocolError) -> None:
        """Report an error and cancel the query on the coordinator."""
        self._report_error(error)
        try:
            await self.cancel()
        except (HTTPError, PrestoError) as cancel_error:
            self._emit(StatementEvent.ERROR, cancel_error)

    async def _report_success(self, results: QueryResults) -> None:
        result = QueryResult(results.stats)
        if self._fetch_info and results.info_uri:
            result.info, result.info_error = await self._fetch_query_info(
                results.info_uri
            )
        logger.info("Query %s finished in state %s", self._query_id, self._state)
        self._emit(StatementEvent.SUCCESS, result)

    async def _fetch_query_info(
        self, info_uri: str
    ) -> Tuple[Optional[Any], Optional[InfoFetchError]]:
        try:
            response = await self._require_client().request(
                "GET", info_uri, session=self._session
            )
        except (HTTPError, PrestoError) as err:
            logger.warning("Failed to fetch info of query %s", self._query_id)
            return None, InfoFetchError(info_uri, cause=err)
        if response.status_code != codes.OK:
            logger.warning("Failed to fetch info of query %s", self._query_id)
            return None, InfoFetchError(info_uri, response_code=response.status_code)
        return response.data, None
