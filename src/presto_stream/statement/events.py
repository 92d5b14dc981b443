from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, DefaultDict, Dict, List, Optional, Union

from presto_stream.utils.exception import InfoFetchError


class StatementEvent(str, Enum):
    """Notifications emitted by a statement, in the order they can occur."""

    # every poll, until the query is first seen FINISHED
    STATE = "state"
    STATE_CHANGE = "state_change"
    COLUMNS = "columns"
    SUCCESS = "success"
    ERROR = "error"
    END = "end"


@dataclass
class QueryResult:
    """Terminal success payload.

    Attributes:
        stats (Dict[str, Any]): Final query stats reported by the coordinator
        info (Optional[Any]): Query info, if it was requested and fetched
        info_error (Optional[InfoFetchError]): Reason the requested info
            couldn't be fetched
    """

    stats: Dict[str, Any]
    info: Optional[Any] = None
    info_error: Optional[InfoFetchError] = None

    @property
    def state(self) -> Optional[str]:
        return self.stats.get("state")


Listener = Callable[..., Any]


class EventEmitter:
    """Synchronous observer registry.

    Listeners are called in registration order, in the task that emits the
    event. An exception raised by a listener propagates to the emitter.
    """

    def __init__(self) -> None:
        self._listeners: DefaultDict[StatementEvent, List[Listener]] = defaultdict(
            list
        )

    def on(self, event: Union[StatementEvent, str], listener: Listener) -> Any:
        """Register a listener.

        Args:
            event (Union[StatementEvent, str]): Event to listen to
            listener (Callable): Callback receiving the event arguments

        Returns:
            The emitter itself, to allow chaining
        """
        self._listeners[StatementEvent(event)].append(listener)
        return self

    def off(self, event: Union[StatementEvent, str], listener: Listener) -> Any:
        listeners = self._listeners[StatementEvent(event)]
        if listener in listeners:
            listeners.remove(listener)
        return self

    def listener_count(self, event: Union[StatementEvent, str]) -> int:
        return len(self._listeners[StatementEvent(event)])

    def _emit(self, event: StatementEvent, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            listener(*args)
