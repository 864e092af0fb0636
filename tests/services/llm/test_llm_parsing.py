"""Tests for model output parsing and the completion client."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from common.config import Config
from common.errors import ErrorKind, ProviderError
from services.llm.client import LLMClient
from services.llm.parsing import parse_json_response, strip_code_fences


class TestParsing:
    def test_strips_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_json(self):
        assert parse_json_response('{"leads": []}') == {"leads": []}

    def test_fenced_json(self):
        assert parse_json_response('```json\n{"name": "Ann"}\n```') == {"name": "Ann"}

    def test_json_wrapped_in_prose(self):
        text = 'Here is what I found: {"leads": [{"name": "Ann Lee"}]} Hope this helps.'
        assert parse_json_response(text) == {"leads": [{"name": "Ann Lee"}]}

    def test_unparseable_raises_parse_error(self):
        with pytest.raises(ProviderError) as exc_info:
            parse_json_response("I do not know this company.")
        assert exc_info.value.kind == ErrorKind.PARSE


def make_openai(content):
    client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    client.chat.completions.create = AsyncMock(return_value=response)
    return client


class TestLLMClient:
    def test_unconfigured_client_is_unavailable(self):
        assert not LLMClient(Config(openai_api_key="")).available

    @pytest.mark.asyncio
    async def test_missing_key_raises_unavailable(self):
        with pytest.raises(ProviderError) as exc_info:
            await LLMClient(Config(openai_api_key="")).complete("hello")
        assert exc_info.value.kind == ErrorKind.PROVIDER_UNAVAILABLE

    @pytest.mark.asyncio
    async def test_complete_json_parses_fenced_answer(self):
        openai_client = make_openai('```json\n{"specialty": "Dental"}\n```')
        llm = LLMClient(Config(openai_api_key=""), client=openai_client)

        result = await llm.complete_json("classify", system="system prompt")

        assert result == {"specialty": "Dental"}
        messages = openai_client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": "system prompt"}

    @pytest.mark.asyncio
    async def test_empty_completion_raises(self):
        llm = LLMClient(Config(openai_api_key=""), client=make_openai(""))
        with pytest.raises(ProviderError) as exc_info:
            await llm.complete("hello")
        assert exc_info.value.kind == ErrorKind.PROVIDER_EMPTY
