"""Row conversion for the two statement output modes.

Object mode produces one ``dict`` per row keyed by column name. Text mode
produces CSV: a header line built from column names, then one block of lines
per server response.
"""
from numbers import Number
from typing import Any, Dict, List, Sequence

from presto_stream.common.json_codec import JSONCodec
from presto_stream.model.query_results import Column

# Integral floats below this magnitude are printed in positional notation
_MAX_PLAIN_FLOAT = 1e21


def to_csv_cell(value: Any, codec: JSONCodec) -> str:
    """Encode a single cell value.

    Numbers are emitted bare, integral floats in positional notation
    (``1.0`` as ``1``, ``1e16`` as ``10000000000000000``). ``None`` is
    emitted as an empty quoted string. Any other value is stringified
    (lists, dicts and booleans through the JSON codec), double quotes are
    doubled and the result is wrapped in double quotes.

    Args:
        value (Any): Cell value
        codec (JSONCodec): Codec used to serialize compound values

    Returns:
        str: Encoded cell
    """
    if value is None:
        return '""'
    if isinstance(value, Number) and not isinstance(value, bool):
        return _format_number(value)
    if isinstance(value, (dict, list, tuple, bool)):
        text = codec.dumps(value)
    else:
        text = str(value)
    return '"' + text.replace('"', '""') + '"'


def _format_number(value: Number) -> str:
    if (
        isinstance(value, float)
        and value.is_integer()
        and abs(value) < _MAX_PLAIN_FLOAT
    ):
        return str(int(value))
    return str(value)


def to_csv_line(cells: Sequence[Any], codec: JSONCodec) -> str:
    return ",".join(to_csv_cell(cell, codec) for cell in cells) + "\n"


def to_csv_header(columns: Sequence[Column], codec: JSONCodec) -> str:
    return to_csv_line([column.name for column in columns], codec)


def to_csv_block(rows: Sequence[Sequence[Any]], codec: JSONCodec) -> str:
    """Encode all rows of a single response as one multi-line block."""
    return "".join(to_csv_line(row, codec) for row in rows)


def deduplicate_column_names(columns: List[Column]) -> None:
    """Make column names unique, in place.

    Records are keyed by name so a repeated name would silently overwrite
    data. The first occurrence keeps its name, following ones get ``_1``,
    ``_2``, ... suffixes counted per name: ``[a, a, b, a]`` becomes
    ``[a, a_1, b, a_2]``.

    Args:
        columns (List[Column]): Columns to rename
    """
    seen: Dict[str, int] = {}
    for column in columns:
        name = column.name
        if name in seen:
            seen[name] += 1
            column.name = f"{name}_{seen[name]}"
        else:
            seen[name] = 0


def to_record(names: Sequence[str], row: Sequence[Any]) -> Dict[str, Any]:
    return dict(zip(names, row))
