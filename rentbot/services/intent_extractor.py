"""Intent extraction through an OpenAI-compatible chat completion endpoint."""

import json
from datetime import date
from typing import Optional

import openai
from pydantic import ValidationError

from rentbot.core.config import get_settings
from rentbot.core.exceptions import (
    ExtractionError,
    ExtractionTimeoutError,
    MalformedExtractionError,
)
from rentbot.core.logging import get_logger
from rentbot.models import ExtractedIntent
from rentbot.utils.formatting import current_period

logger = get_logger(__name__)


def build_system_prompt(period: str, currency: str = "UGX") -> str:
    """
    Instruction prompt sent with every message.

    ``period`` is the current calendar month; its year is also the year
    month names resolve to.
    """
    year = period[:4]
    return f"""You extract payment information from Ugandan landlord messages.
Return ONLY valid JSON, no markdown, no explanation, no code blocks.

Response format:
{{
  "action": "record_payment" | "check_status" | "unknown",
  "tenant_name": "string or null",
  "amount": number or null (in {currency}),
  "period": "YYYY-MM" or null
}}

Rules:
- Amounts: "500k" = 500000, "1m" = 1000000, "600" = 600000 (assume thousands)
- Months: "December" = "{year}-12", "Dec" = "{year}-12", "12" = "{year}-12"
- If no period specified, use current month: "{period}"
- Tenant names are case-insensitive
- "Did X pay?" or "Has X paid?" = check_status action

Examples:
"Kamau paid 500k" → {{"action":"record_payment","tenant_name":"Kamau","amount":500000,"period":"{period}"}}
"Record 600000 from John December" → {{"action":"record_payment","tenant_name":"John","amount":600000,"period":"{year}-12"}}
"Did Sarah pay this month?" → {{"action":"check_status","tenant_name":"Sarah","amount":null,"period":"{period}"}}
"Amina 450k" → {{"action":"record_payment","tenant_name":"Amina","amount":450000,"period":"{period}"}}"""


class IntentExtractor:
    """Turns free-text landlord messages into an ExtractedIntent."""

    def __init__(self, client: Optional[openai.AsyncOpenAI] = None):
        settings = get_settings()
        self.client = client or openai.AsyncOpenAI(
            api_key=settings.groq_api_key,
            base_url=settings.llm_base_url,
            timeout=settings.llm_timeout_seconds,
        )
        self.model = settings.llm_model
        self.temperature = settings.llm_temperature
        self.max_tokens = settings.llm_max_tokens
        self.currency = settings.currency_code
        self.tz = settings.business_timezone

    async def extract(self, text: str, today: Optional[date] = None) -> ExtractedIntent:
        """
        Extract an intent from ``text``.

        Raises:
            ExtractionTimeoutError: If the completion call times out
            MalformedExtractionError: If the response is not the expected JSON
            ExtractionError: For any other completion failure
        """
        period = current_period(today, tz=self.tz)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": build_system_prompt(period, self.currency)},
                    {"role": "user", "content": text},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
        except openai.APITimeoutError as e:
            logger.error("Extraction service timeout", error=str(e))
            raise ExtractionTimeoutError(f"API timeout: {str(e)}") from e
        except openai.APIError as e:
            logger.error("Extraction service error", error=str(e))
            raise ExtractionError(f"API error: {str(e)}") from e

        try:
            raw = (response.choices[0].message.content or "").strip()
        except (AttributeError, IndexError) as e:
            raise MalformedExtractionError("Completion has no message content") from e

        logger.info("Extraction response received", raw_response=raw)

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedExtractionError(f"Response is not JSON: {e}", raw_response=raw) from e

        if not isinstance(payload, dict):
            raise MalformedExtractionError("Response is not a JSON object", raw_response=raw)

        try:
            return ExtractedIntent.model_validate(payload)
        except ValidationError as e:
            raise MalformedExtractionError(f"Response does not match intent shape: {e}", raw_response=raw) from e
