import httpx

from common.config import Config
from common.logging import get_logger
from services.serper_search.schemas import SearchHit, SearchResult

logger = get_logger(__name__)

DEFAULT_MAX_RESULTS = 10


class WebSearchService:
    """
    Google results through the Serper API.

    HTTP and network failures come back on the SearchResult (`error` set,
    `success` false) so a multi-query stage can move on to its next query.

    Example:
        ws = WebSearchService(config)
        result = await ws.search('"@acme.com" contact', max_results=10)
    """

    def __init__(self, settings: Config, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = settings.serper_base_url
        self.api_key = settings.serper_api_key.get_secret_value()
        self.timeout = settings.provider_request_timeout
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def _post(self, query: str, max_results: int) -> dict:
        async with httpx.AsyncClient(
            headers={"X-API-KEY": self.api_key, "Content-Type": "application/json"},
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            resp = await client.post(self.base_url, json={"q": query, "num": max_results})
            resp.raise_for_status()
            return resp.json()

    async def search(self, query: str, max_results: int = DEFAULT_MAX_RESULTS) -> SearchResult:
        if not self.available:
            return SearchResult(query=query, error="SERPER_API_KEY is not configured")

        logger.info(f"[Search] '{query}' (max {max_results})")
        try:
            data = await self._post(query, max_results)
        except httpx.HTTPStatusError as e:
            logger.warning(f"[Search] HTTP {e.response.status_code} for '{query}'")
            return SearchResult(query=query, error=f"HTTP {e.response.status_code}")
        except httpx.RequestError as e:
            logger.warning(f"[Search] Request failed for '{query}': {e!r}")
            return SearchResult(query=query, error=str(e) or type(e).__name__)
        except ValueError:
            return SearchResult(query=query, error="Invalid JSON in response")
        if not isinstance(data, dict):
            return SearchResult(query=query, error="Unexpected response shape")

        hits: dict[str, SearchHit] = {}
        for item in (data.get("organic") or [])[:max_results]:
            hit = SearchHit.from_organic(item)
            if hit:
                hits.setdefault(hit.link, hit)

        return SearchResult(query=query, success=True, hits=list(hits.values()), credits_used=data.get("credits"))
