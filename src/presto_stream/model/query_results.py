from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError

from presto_stream.common.constants import QueryState
from presto_stream.model import PrestoBaseModel
from presto_stream.utils.exception import ProtocolError


class Column(PrestoBaseModel):
    name: str
    type: str


class QueryResults(PrestoBaseModel):
    """Payload of ``POST /v1/statement`` and every ``GET <nextUri>``.

    Example of a response carrying rows::

        {
            "id": "20140120_032523_00000_32v8g",
            "infoUri": "http://localhost:8080/v1/query/20140120_032523_00000_32v8g",
            "nextUri": "http://localhost:8080/v1/statement/20140120_032523_00000_32v8g/2",
            "stats": {"state": "RUNNING", "processedRows": 2532704, ...},
            "columns": [{"name": "cnt", "type": "bigint"}],
            "data": [[1266352]]
        }

    Once the result is exhausted ``nextUri`` is absent.
    """

    id: str
    info_uri: Optional[str] = Field(None, alias="infoUri")
    next_uri: Optional[str] = Field(None, alias="nextUri")
    stats: Dict[str, Any] = Field(default_factory=dict)
    columns: Optional[List[Column]] = None
    data: Optional[List[List[Any]]] = None

    @property
    def state(self) -> Optional[QueryState]:
        state = self.stats.get("state")
        if state is None:
            return None
        try:
            return QueryState(state)
        except ValueError:
            return None

    @property
    def raw_state(self) -> Optional[str]:
        return self.stats.get("state")


def parse_query_results(response_code: int, data: Any, context: str) -> QueryResults:
    """Validate a statement payload.

    Args:
        response_code (int): HTTP status code of the response
        data (Any): Decoded response body
        context (str): Request description used in error messages

    Returns:
        QueryResults: Validated payload

    Raises:
        ProtocolError: Payload is not a valid statement response
    """
    if not isinstance(data, dict):
        raise ProtocolError(
            f"Unexpected response body for {context}", response_code, data
        )
    try:
        return QueryResults.parse_model(data)
    except ValidationError as err:
        raise ProtocolError(
            f"Invalid response for {context}: {err}", response_code, data
        ) from err
