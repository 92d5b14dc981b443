import logging
from dataclasses import dataclass
from typing import Any, Optional

from httpx import Headers, Response

from presto_stream.client.constants import HEADER_CLEAR_SESSION, HEADER_SET_SESSION
from presto_stream.common.json_codec import JSONCodec
from presto_stream.utils.exception import ProtocolError

logger = logging.getLogger(__name__)


@dataclass
class ApiResponse:
    """Fully buffered coordinator response.

    Attributes:
        status_code (int): HTTP status code
        data (Any): Decoded JSON body, raw text if the body isn't JSON,
            None if the body is empty
        headers (Headers): Response headers
    """

    status_code: int
    data: Any
    headers: Headers


def _is_json(response: Response, text: str) -> bool:
    if "json" in response.headers.get("Content-Type", ""):
        return True
    return text.lstrip()[:1] in ("{", "[")


def decode_response(response: Response, codec: JSONCodec) -> ApiResponse:
    """Decode response body with the provided JSON codec.

    Args:
        response (Response): Read HTTP response
        codec (JSONCodec): Codec to decode JSON body with

    Returns:
        ApiResponse: Decoded response

    Raises:
        ProtocolError: Successful response carries a body that is not valid JSON
    """
    text = response.text
    data: Any = text or None
    if text and _is_json(response, text):
        try:
            data = codec.loads(text)
        except ValueError as err:
            if response.is_success:
                raise ProtocolError(
                    f"Invalid JSON in response body: {err}",
                    response.status_code,
                    text,
                ) from err
            logger.debug("Error response body is not valid JSON: %s", text)
    return ApiResponse(response.status_code, data, response.headers)


def updated_session(headers: Headers, session: Optional[str]) -> Optional[str]:
    """Apply session update response headers to a session token.

    Args:
        headers (Headers): Response headers
        session (Optional[str]): Current session token

    Returns:
        Optional[str]: New session token
    """
    if HEADER_CLEAR_SESSION in headers:
        session = None
    if headers.get(HEADER_SET_SESSION):
        session = headers[HEADER_SET_SESSION]
    return session
