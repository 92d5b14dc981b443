from presto_stream.common.constants import VERSION

USER_AGENT: str = f"presto-stream/{VERSION}"

HEADER_USER = "X-Presto-User"
HEADER_SOURCE = "X-Presto-Source"
HEADER_CATALOG = "X-Presto-Catalog"
HEADER_SCHEMA = "X-Presto-Schema"
HEADER_TIME_ZONE = "X-Presto-Time-Zone"
HEADER_SESSION = "X-Presto-Session"
HEADER_SET_SESSION = "X-Presto-Set-Session"
HEADER_CLEAR_SESSION = "X-Presto-Clear-Session"

# Randomized delay range (seconds) before retrying a 503 response
RETRY_DELAY_MIN: float = 0.05
RETRY_DELAY_MAX: float = 0.1
