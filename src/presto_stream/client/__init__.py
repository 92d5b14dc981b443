from presto_stream.client.client import AsyncClient
from presto_stream.client.hooks import log_request, log_response
