from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError as SchemaError

from common.errors import ErrorKind
from common.logging import get_logger
from models.enrichment import ProviderResult

logger = get_logger(__name__)


class ContactDatabaseClient(ABC):
    """
    A third-party contact database queried by domain.

    Subclasses implement `_lookup` (HTTP + normalisation into Lead / CompanyInfo)
    and may raise httpx or schema errors; `lookup` turns every failure into a
    ProviderResult so the caller never sees an exception.
    """

    name: str = "contact-db"

    def __init__(self, base_url: str, api_key: str, timeout: float = 10.0, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _client(self, headers: dict[str, str] | None = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=self.timeout,
            transport=self._transport,
        )

    async def lookup(self, domain: str) -> ProviderResult:
        if not self.available:
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_UNAVAILABLE, f"{self.name} API key not configured")

        logger.info(f"[{self.name}] Looking up {domain}")
        try:
            result = await self._lookup(domain)
        except httpx.TimeoutException as e:
            logger.warning(f"[{self.name}] Timed out for {domain}: {e!r}")
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_TIMEOUT, f"{self.name} request timed out")
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"[{self.name}] HTTP {status} for {domain}")
            kind = ErrorKind.PROVIDER_UNAVAILABLE if status in (401, 403) else ErrorKind.PROVIDER_ERROR
            if status == 404:
                kind = ErrorKind.PROVIDER_EMPTY
            return ProviderResult.failure(self.name, kind, f"{self.name} returned HTTP {status}")
        except httpx.RequestError as e:
            logger.warning(f"[{self.name}] Request failed for {domain}: {e!r}")
            return ProviderResult.failure(self.name, ErrorKind.PROVIDER_ERROR, f"{self.name} request failed: {e}")
        except (SchemaError, ValueError) as e:
            logger.warning(f"[{self.name}] Unexpected response for {domain}: {e}")
            return ProviderResult.failure(self.name, ErrorKind.PARSE, f"{self.name} returned an unexpected payload")

        if result.ok:
            logger.info(f"[{self.name}] Found {len(result.leads)} leads for {domain}")
        else:
            logger.info(f"[{self.name}] No person-level contacts for {domain}")
        return result

    @abstractmethod
    async def _lookup(self, domain: str) -> ProviderResult: ...
