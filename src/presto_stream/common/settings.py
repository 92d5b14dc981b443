import logging
import os
from dataclasses import dataclass, field
from ssl import SSLContext
from typing import Any, Callable, Optional, Union

from pydantic import SecretStr

from presto_stream.common.constants import (
    DEFAULT_HOST,
    DEFAULT_POLL_INTERVAL_SECONDS,
    DEFAULT_PORT,
    DEFAULT_SOURCE,
    DEFAULT_TIMEOUT_SECONDS,
)
from presto_stream.common.json_codec import DefaultJSONCodec, JSONCodec

logger = logging.getLogger(__name__)

HOST_ENV = "PRESTO_HOST"
PORT_ENV = "PRESTO_PORT"
USER_ENV = "PRESTO_USER"
PASSWORD_ENV = "PRESTO_PASSWORD"
CATALOG_ENV = "PRESTO_CATALOG"
SCHEMA_ENV = "PRESTO_SCHEMA"
SOURCE_ENV = "PRESTO_SOURCE"


def from_env(var_name: str, default: Any = None) -> Callable:
    def inner() -> Any:
        return os.environ.get(var_name, default)

    return inner


def port_from_env() -> int:
    return int(os.environ.get(PORT_ENV, DEFAULT_PORT))


def user_from_env() -> Optional[str]:
    return os.environ.get(USER_ENV, os.environ.get("USER"))


@dataclass
class Settings:
    """Settings for presto-stream client.

    Attributes:
        host (str): Coordinator host name, optionally prefixed with schema
        port (int): Coordinator port
        user (Optional[str]): User name sent with every request
        password (Optional[SecretStr]): Password, enables HTTP Basic auth
        catalog (Optional[str]): Default catalog for submitted queries
        schema (Optional[str]): Default schema for submitted queries
        source (str): Query source reported to the coordinator
        ssl (bool): Connect over https
        verify (Union[bool, str, SSLContext]): TLS verification, passed to httpx
        poll_interval (float): Seconds to wait between polls of a query
            that hasn't started producing rows
        object_mode (bool): Default output mode of statements.
            Records keyed by column name if True, CSV text otherwise
        timeout (Optional[float]): HTTP request timeout in seconds
        json_codec (JSONCodec): JSON serialization strategy
    """

    host: str = field(default_factory=from_env(HOST_ENV, DEFAULT_HOST))
    port: int = field(default_factory=port_from_env)
    user: Optional[str] = field(default_factory=user_from_env)
    password: Optional[SecretStr] = field(default_factory=from_env(PASSWORD_ENV))
    catalog: Optional[str] = field(default_factory=from_env(CATALOG_ENV))
    schema: Optional[str] = field(default_factory=from_env(SCHEMA_ENV))
    source: str = field(default_factory=from_env(SOURCE_ENV, DEFAULT_SOURCE))
    ssl: bool = False
    verify: Union[bool, str, SSLContext] = True
    poll_interval: float = DEFAULT_POLL_INTERVAL_SECONDS
    object_mode: bool = False
    timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS
    json_codec: JSONCodec = field(default_factory=DefaultJSONCodec)

    def __post_init__(self) -> None:
        if isinstance(self.password, str):
            self.password = SecretStr(self.password)
        if self.password is not None and not self.user:
            logger.warning("Password provided without user, basic auth is disabled")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
