from presto_stream.common.constants import VERSION, QueryState
from presto_stream.common.json_codec import (
    DecimalJSONCodec,
    DefaultJSONCodec,
    JSONCodec,
)
from presto_stream.common.settings import Settings
from presto_stream.presto_client import PrestoClient
from presto_stream.statement import QueryResult, Statement, StatementEvent
from presto_stream.utils.exception import (
    CancelError,
    InfoFetchError,
    PrestoError,
    ProtocolError,
    QueryError,
    UsageError,
)

__version__ = VERSION
