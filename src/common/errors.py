"""
Error kinds shared by provider adapters, the orchestrator and the HTTP layer.

Provider clients raise ProviderError; stage adapters turn it into a failed
ProviderResult; the routes map ErrorKind to a status code.
"""

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    PROVIDER_TIMEOUT = "provider_timeout"
    PROVIDER_EMPTY = "provider_empty"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    PROVIDER_ERROR = "provider_error"
    PARSE = "parse"
    ALL_STAGES_EXHAUSTED = "all_stages_exhausted"
    TIMEOUT = "timeout"


# HTTP status per kind; anything unlisted is an unexpected failure
HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.ALL_STAGES_EXHAUSTED: 404,
    ErrorKind.PROVIDER_EMPTY: 404,
    ErrorKind.PROVIDER_TIMEOUT: 404,
    ErrorKind.PROVIDER_UNAVAILABLE: 404,
    ErrorKind.TIMEOUT: 404,
}


def http_status_for(kind: ErrorKind | None) -> int:
    if kind is None:
        return 200
    return HTTP_STATUS_BY_KIND.get(kind, 500)


class ProviderError(Exception):
    """A provider call failed in a way the caller can classify."""

    def __init__(self, kind: ErrorKind, message: str, provider: str | None = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.provider = provider

    def __str__(self) -> str:
        prefix = f"[{self.provider}] " if self.provider else ""
        return f"{prefix}{self.kind.value}: {self.message}"
