"""
Tests for intent extraction.
"""
import json
from datetime import date
from unittest.mock import AsyncMock

import httpx
import openai
import pytest

from rentbot.core.exceptions import ExtractionError, ExtractionTimeoutError, MalformedExtractionError
from rentbot.models import IntentAction
from rentbot.services.intent_extractor import IntentExtractor, build_system_prompt


class TestSystemPrompt:
    def test_uses_current_month_and_year(self):
        prompt = build_system_prompt("2026-10")

        assert 'use current month: "2026-10"' in prompt
        assert '"December" = "2026-12"' in prompt
        assert '"600" = 600000' in prompt
        assert "2024" not in prompt

    def test_currency_in_output_shape(self):
        assert "(in KES)" in build_system_prompt("2026-10", currency="KES")


class TestIntentExtractor:
    @pytest.fixture
    def extractor(self, llm_client):
        return IntentExtractor(client=llm_client)

    @pytest.mark.asyncio
    async def test_record_payment(self, extractor, set_intent):
        set_intent({"action": "record_payment", "tenant_name": "Kamau", "amount": 500000, "period": "2026-10"})

        intent = await extractor.extract("Kamau paid 500k", today=date(2026, 10, 19))

        assert intent.action == IntentAction.RECORD_PAYMENT
        assert intent.tenant_name == "Kamau"
        assert intent.amount == 500000
        assert intent.period == "2026-10"

    @pytest.mark.asyncio
    async def test_request_contract(self, extractor, llm_client, set_intent):
        set_intent({"action": "unknown", "tenant_name": None, "amount": None, "period": None})

        await extractor.extract("hello", today=date(2026, 10, 19))

        kwargs = llm_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "llama-3.3-70b-versatile"
        assert kwargs["temperature"] == 0.1
        assert kwargs["max_tokens"] == 300
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["messages"][0]["role"] == "system"
        assert "2026-10" in kwargs["messages"][0]["content"]
        assert kwargs["messages"][1] == {"role": "user", "content": "hello"}

    @pytest.mark.asyncio
    async def test_non_json_is_malformed(self, extractor, set_intent):
        set_intent(raw="Sure! Kamau paid 500k.")

        with pytest.raises(MalformedExtractionError) as exc_info:
            await extractor.extract("Kamau paid 500k")

        assert exc_info.value.raw_response == "Sure! Kamau paid 500k."

    @pytest.mark.asyncio
    async def test_json_array_is_malformed(self, extractor, set_intent):
        set_intent(raw=json.dumps([1, 2]))

        with pytest.raises(MalformedExtractionError):
            await extractor.extract("x")

    @pytest.mark.asyncio
    async def test_unknown_action_is_malformed(self, extractor, set_intent):
        set_intent({"action": "delete_tenant", "tenant_name": "Kamau", "amount": None, "period": None})

        with pytest.raises(MalformedExtractionError):
            await extractor.extract("delete Kamau")

    @pytest.mark.asyncio
    async def test_bad_period_is_malformed(self, extractor, set_intent):
        set_intent({"action": "check_status", "tenant_name": "Sarah", "amount": None, "period": "December"})

        with pytest.raises(MalformedExtractionError):
            await extractor.extract("Did Sarah pay in December?")

    @pytest.mark.asyncio
    async def test_fractional_amount_is_malformed(self, extractor, set_intent):
        set_intent({"action": "record_payment", "tenant_name": "Sarah", "amount": 1500.5, "period": "2026-10"})

        with pytest.raises(MalformedExtractionError):
            await extractor.extract("Sarah 1500.5")

    @pytest.mark.asyncio
    async def test_blank_tenant_name_becomes_missing(self, extractor, set_intent):
        set_intent({"action": "record_payment", "tenant_name": "  ", "amount": 500000, "period": "2026-10"})

        intent = await extractor.extract("paid 500k")
        assert intent.tenant_name is None

    @pytest.mark.asyncio
    async def test_timeout(self, llm_client):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        llm_client.chat.completions.create = AsyncMock(side_effect=openai.APITimeoutError(request=request))
        extractor = IntentExtractor(client=llm_client)

        with pytest.raises(ExtractionTimeoutError):
            await extractor.extract("Kamau paid 500k")

    @pytest.mark.asyncio
    async def test_api_error(self, llm_client):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        llm_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIConnectionError(request=request)
        )
        extractor = IntentExtractor(client=llm_client)

        with pytest.raises(ExtractionError):
            await extractor.extract("Kamau paid 500k")

    @pytest.mark.asyncio
    async def test_called_once_without_retry(self, llm_client):
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        llm_client.chat.completions.create = AsyncMock(side_effect=openai.APITimeoutError(request=request))
        extractor = IntentExtractor(client=llm_client)

        with pytest.raises(ExtractionError):
            await extractor.extract("Kamau paid 500k")

        assert llm_client.chat.completions.create.await_count == 1
