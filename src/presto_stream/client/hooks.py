from logging import getLogger

from httpx import Request, Response

logger = getLogger(__name__)


async def log_request(request: Request) -> None:
    """Log HTTP requests.

    Hook for an HTTP client

    Args:
        request (Request): Request to log
    """
    logger.debug(
        "Request event hook: %s %s - Waiting for response", request.method, request.url
    )


async def log_response(response: Response) -> None:
    """Log HTTP response.

    Hook for an HTTP client

    Args:
        response (Response): Response to log
    """
    request = response.request
    logger.debug(
        "Response event hook: %s %s - Status %s",
        request.method,
        request.url,
        response.status_code,
    )
