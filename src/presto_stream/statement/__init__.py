from presto_stream.statement.events import QueryResult, StatementEvent
from presto_stream.statement.statement import Statement
