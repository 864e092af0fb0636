"""Mapping of OpenAI SDK exceptions onto the pipeline error taxonomy."""

from collections.abc import Generator
from contextlib import contextmanager

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AuthenticationError,
    PermissionDeniedError,
    RateLimitError,
)

from common.errors import ErrorKind, ProviderError
from common.logging import get_logger

logger = get_logger(__name__)


def format_openai_error(error: Exception) -> str:
    """Short, log-friendly description of an OpenAI SDK exception."""
    if isinstance(error, AuthenticationError):
        return "OpenAI authentication failed - check OPENAI_API_KEY"
    if isinstance(error, PermissionDeniedError):
        return "OpenAI permission denied for the configured model"
    if isinstance(error, RateLimitError):
        return "OpenAI rate limit exceeded"
    if isinstance(error, APITimeoutError):
        return "OpenAI request timed out"
    if isinstance(error, APIConnectionError):
        return f"Could not reach OpenAI: {error}"
    status = getattr(error, "status_code", None)
    return f"OpenAI API error (status: {status}): {error}" if status else f"OpenAI API error: {error}"


def _kind_for(error: Exception) -> ErrorKind:
    if isinstance(error, (AuthenticationError, PermissionDeniedError)):
        return ErrorKind.PROVIDER_UNAVAILABLE
    if isinstance(error, APITimeoutError):
        return ErrorKind.PROVIDER_TIMEOUT
    return ErrorKind.PROVIDER_ERROR


# Order matters: APITimeoutError subclasses APIConnectionError
OPENAI_EXCEPTIONS = (
    PermissionDeniedError,
    AuthenticationError,
    RateLimitError,
    APITimeoutError,
    APIConnectionError,
    APIError,
)


@contextmanager
def handle_openai_errors(operation_name: str) -> Generator[None, None, None]:
    """Translate OpenAI SDK failures inside the block into ProviderError.

    Authentication and permission problems become PROVIDER_UNAVAILABLE, SDK
    timeouts PROVIDER_TIMEOUT, anything else from the SDK PROVIDER_ERROR.
    Other exceptions are logged and propagate unchanged.

    Example:
        with handle_openai_errors("Consolidation"):
            response = await client.chat.completions.create(...)
    """
    try:
        yield
    except OPENAI_EXCEPTIONS as e:
        message = format_openai_error(e)
        logger.error(f"[{operation_name}] {message}")
        raise ProviderError(_kind_for(e), message, provider="openai") from e
    except ProviderError:
        raise
    except Exception as e:
        logger.error(f"[{operation_name}] Unexpected {type(e).__name__}: {e!r}")
        raise
