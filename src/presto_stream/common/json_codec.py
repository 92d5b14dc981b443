import json
from decimal import Decimal
from typing import Any, Protocol


class JSONCodec(Protocol):
    """JSON serialization strategy used for all response bodies and cells."""

    def loads(self, text: str) -> Any:
        ...

    def dumps(self, obj: Any) -> str:
        ...


class DefaultJSONCodec:
    """Standard library JSON codec."""

    def loads(self, text: str) -> Any:
        return json.loads(text)

    def dumps(self, obj: Any) -> str:
        return json.dumps(obj, separators=(",", ":"))


class DecimalJSONCodec(DefaultJSONCodec):
    """JSON codec that preserves numeric precision.

    Python integers are arbitrary precision already, floating point numbers
    are parsed into :py:class:`decimal.Decimal` so values like
    ``0.1000000000000000055511151231257827`` survive a round trip.
    """

    def loads(self, text: str) -> Any:
        return json.loads(text, parse_float=Decimal)

    def dumps(self, obj: Any) -> str:
        return json.dumps(obj, separators=(",", ":"), default=_encode_decimal)


def _encode_decimal(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
