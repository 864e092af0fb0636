"""
Async OpenAI completion client used by every AI-assisted stage.

Example:
  from common.config import config
  from services.llm.client import LLMClient

  llm = LLMClient(config)
  text = await llm.complete("Say 'hello'")
  data = await llm.complete_json(prompt, system=SYSTEM_PROMPT)

Uses an Azure deployment when AZURE_OPENAI_ENDPOINT is set, api.openai.com otherwise.
"""

from typing import Any

from openai import AsyncAzureOpenAI, AsyncOpenAI

from common.config import Config
from common.errors import ErrorKind, ProviderError
from common.logging import get_logger
from common.openai_errors import handle_openai_errors
from services.llm.parsing import parse_json_response

logger = get_logger(__name__)


class LLMClient:
    def __init__(self, settings: Config, client: AsyncOpenAI | None = None):
        self.model = settings.openai_model
        self.temperature = settings.temperature
        self.max_tokens = settings.max_tokens
        self._api_key = settings.openai_api_key.get_secret_value()
        self._azure_endpoint = settings.azure_openai_endpoint
        self._api_version = settings.azure_openai_api_version
        self._timeout = settings.provider_request_timeout * 3
        self._client = client

    @property
    def available(self) -> bool:
        return self._client is not None or bool(self._api_key)

    def _get_client(self) -> AsyncOpenAI:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise ProviderError(ErrorKind.PROVIDER_UNAVAILABLE, "OPENAI_API_KEY is not configured", provider="openai")

        if self._azure_endpoint:
            logger.info(f"Creating Azure OpenAI client for model: {self.model}")
            self._client = AsyncAzureOpenAI(
                api_key=self._api_key,
                api_version=self._api_version,
                azure_endpoint=self._azure_endpoint,
                timeout=self._timeout,
            )
        else:
            logger.info(f"Creating OpenAI client for model: {self.model}")
            self._client = AsyncOpenAI(api_key=self._api_key, timeout=self._timeout)
        return self._client

    async def complete(
        self,
        prompt: str,
        system: str | None = None,
        *,
        max_tokens: int | None = None,
        temperature: float | None = None,
        operation: str = "Completion",
    ) -> str:
        """Run a single chat completion and return the message text."""
        client = self._get_client()

        messages: list[dict[str, str]] = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        with handle_openai_errors(operation):
            response = await client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
            )

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ProviderError(ErrorKind.PROVIDER_EMPTY, "Empty completion", provider="openai")
        return content

    async def complete_json(self, prompt: str, system: str | None = None, **kwargs) -> Any:
        """Completion parsed as JSON (markdown fences stripped). Raises ProviderError(PARSE) on bad output."""
        text = await self.complete(prompt, system, **kwargs)
        return parse_json_response(text)
