from __future__ import annotations

from enum import Enum

VERSION: str = "0.1.0"

DEFAULT_HOST: str = "localhost"
DEFAULT_PORT: int = 8080
DEFAULT_SOURCE: str = "presto-stream"
DEFAULT_TIMEOUT_SECONDS: float = 60.0
DEFAULT_POLL_INTERVAL_SECONDS: float = 3.0
# Max number of items retained in the statement output queue
# before back-pressure is signaled
DEFAULT_HIGH_WATER_MARK: int = 16


class QueryState(str, Enum):
    """Query states as reported by the coordinator."""

    QUEUED = "QUEUED"
    PLANNING = "PLANNING"
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    CANCELED = "CANCELED"
    FAILED = "FAILED"

    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES

    def is_polling(self) -> bool:
        return self in POLLING_STATES


TERMINAL_STATES = frozenset(
    {QueryState.FINISHED, QueryState.CANCELED, QueryState.FAILED}
)
POLLING_STATES = frozenset(
    {QueryState.QUEUED, QueryState.PLANNING, QueryState.STARTING, QueryState.RUNNING}
)
