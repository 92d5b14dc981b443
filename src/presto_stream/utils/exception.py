from typing import Any, Optional


class PrestoError(Exception):
    """Base class for all presto-stream errors."""


class UsageError(PrestoError, ValueError):
    """Invalid arguments provided by the caller.

    Raised before any network call is made.
    """


class ProtocolError(PrestoError):
    """Server response violates the expected protocol contract.

    Args:
        message (str): Error message
        response_code (Optional[int]): HTTP status code of the response
        data (Any): Decoded response body, or raw text if it wasn't JSON

    Attributes:
        response_code (Optional[int]): HTTP status code of the response
        data (Any): Decoded response body, or raw text if it wasn't JSON
    """

    def __init__(
        self,
        message: str,
        response_code: Optional[int] = None,
        data: Any = None,
    ):
        super().__init__(message)
        self.response_code = response_code
        self.data = data


class QueryError(ProtocolError):
    """Query execution failed on the server.

    Args:
        message (str): Error message reported by the server
        response_code (Optional[int]): HTTP status code of the response
        data (Any): Decoded response body
        error_info (Any): Error object reported by the server

    Attributes:
        error_info (Any): Error object reported by the server
    """

    def __init__(
        self,
        message: str,
        response_code: Optional[int] = None,
        data: Any = None,
        error_info: Any = None,
    ):
        super().__init__(message, response_code, data)
        self.error_info = error_info


class CancelError(ProtocolError):
    """Remote query cancellation returned an unexpected status."""

    def __init__(
        self,
        query_id: str,
        response_code: Optional[int] = None,
        data: Any = None,
    ):
        super().__init__(
            f"Query {query_id} fetch canceled, but remote cancel may have failed",
            response_code,
            data,
        )
        self.query_id = query_id


class InfoFetchError(PrestoError):
    """Query info could not be retrieved after completion.

    Never raised to the caller, only reported inside a successful
    :py:class:`QueryResult <presto_stream.statement.events.QueryResult>`.

    Attributes:
        info_uri (str): Info URI that was requested
        cause (Optional[BaseException]): Underlying error, if any
    """

    def __init__(
        self,
        info_uri: str,
        response_code: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        reason = f"status {response_code}" if response_code else repr(cause)
        super().__init__(f"Failed to fetch query info from {info_uri}: {reason}")
        self.info_uri = info_uri
        self.response_code = response_code
        self.cause = cause


def error_from_response(
    response_code: Optional[int], data: Any, default_message: str
) -> ProtocolError:
    """Build a proper error from a failed response.

    If the body carries an ``error`` object with a message, a
    :py:class:`QueryError` with that message is returned. Otherwise a
    generic error with the default message and the raw body is returned.

    Args:
        response_code (Optional[int]): HTTP status code
        data (Any): Decoded response body
        default_message (str): Message used when the server provided none

    Returns:
        ProtocolError: Error to raise or report
    """
    error_info = data.get("error") if isinstance(data, dict) else None
    if isinstance(error_info, dict) and error_info.get("message"):
        return QueryError(error_info["message"], response_code, data, error_info)
    if error_info:
        return QueryError(default_message, response_code, data, error_info)
    if data:
        default_message = f"{default_message}: {data}"
    return ProtocolError(default_message, response_code, data)
