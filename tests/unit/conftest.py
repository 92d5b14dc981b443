from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from pytest import fixture
from pytest_httpx import HTTPXMock

from presto_stream import PrestoClient, Settings
from presto_stream.utils.util import prune_dict


@fixture
def settings() -> Settings:
    return Settings(
        host="presto.local",
        port=8080,
        user="tester",
        password=None,
        catalog="hive",
        schema="default",
        source="unit-tests",
        poll_interval=0.01,
    )


@fixture
async def client(settings: Settings) -> AsyncIterator[PrestoClient]:
    async with PrestoClient(settings) as client:
        yield client


@fixture
def base_url() -> str:
    return "http://presto.local:8080"


@fixture
def query_id() -> str:
    return "20240101_120000_00001_abcde"


@fixture
def statement_url(base_url: str) -> str:
    return f"{base_url}/v1/statement"


@fixture
def info_uri(base_url: str, query_id: str) -> str:
    return f"{base_url}/v1/query/{query_id}"


@fixture
def next_uri(base_url: str, query_id: str) -> Callable[[int], str]:
    def inner(token: int) -> str:
        return f"{base_url}/v1/statement/{query_id}/{token}"

    return inner


@fixture
def columns() -> List[Dict[str, str]]:
    return [{"name": "id", "type": "bigint"}, {"name": "name", "type": "varchar"}]


@fixture
def query_results(query_id: str, info_uri: str) -> Callable[..., Dict[str, Any]]:
    """Build a statement response payload."""

    def inner(
        state: str,
        next_uri: Optional[str] = None,
        columns: Optional[List[Dict[str, str]]] = None,
        data: Optional[List[List[Any]]] = None,
        error: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        return prune_dict(
            {
                "id": query_id,
                "infoUri": info_uri,
                "nextUri": next_uri,
                "stats": {"state": state},
                "columns": columns,
                "data": data,
                "error": error,
            }
        )

    return inner


@fixture
def mock_submit(
    httpx_mock: HTTPXMock,
    statement_url: str,
    query_results: Callable,
    next_uri: Callable,
) -> Callable:
    """Register a successful query submission response."""

    def inner(**kwargs: Any) -> None:
        httpx_mock.add_response(
            url=statement_url,
            method="POST",
            json=query_results("QUEUED", next_uri(1)),
            **kwargs,
        )

    return inner
