from httpx import codes
from pytest import raises

from presto_stream.common.constants import QueryState
from presto_stream.model.query_results import parse_query_results
from presto_stream.utils.exception import ProtocolError


def test_parse_query_results() -> None:
    results = parse_query_results(
        codes.OK,
        {
            "id": "q1",
            "infoUri": "http://presto/v1/query/q1",
            "nextUri": "http://presto/v1/statement/q1/1",
            "stats": {"state": "RUNNING", "processedRows": 10},
            "columns": [{"name": "a", "type": "bigint"}],
            "data": [[1]],
            "updateType": "INSERT",
        },
        "test",
    )

    assert results.next_uri == "http://presto/v1/statement/q1/1"
    assert results.state == QueryState.RUNNING
    assert results.state.is_polling() and not results.state.is_terminal()
    assert results.columns[0].name == "a"
    assert results.data == [[1]]
    assert results.info_uri == "http://presto/v1/query/q1"
    assert results.model_extra == {"updateType": "INSERT"}, "Extra fields dropped"


def test_parse_query_results_unknown_state() -> None:
    results = parse_query_results(codes.OK, {"id": "q1", "stats": {"state": "NEW"}}, "t")
    assert results.state is None
    assert results.raw_state == "NEW"


def test_parse_query_results_invalid() -> None:
    with raises(ProtocolError):
        parse_query_results(codes.OK, "not json", "test")
    with raises(ProtocolError):
        parse_query_results(codes.OK, {"stats": {}}, "test")
