from presto_stream.common.json_codec import (
    DecimalJSONCodec,
    DefaultJSONCodec,
    JSONCodec,
)
from presto_stream.common.settings import Settings
