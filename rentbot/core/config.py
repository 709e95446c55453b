"""Application configuration and settings."""

from functools import lru_cache
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Service Configuration
    service_name: str = Field(default="rentbot")
    service_version: str = Field(default="1.0.0")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    api_prefix: str = Field(default="/api/v1")

    # Supabase Configuration
    supabase_url: AnyHttpUrl
    supabase_key: str

    # Extraction service (Groq, OpenAI-compatible endpoint)
    groq_api_key: str
    llm_base_url: str = Field(default="https://api.groq.com/openai/v1")
    llm_model: str = Field(default="llama-3.3-70b-versatile")
    llm_temperature: float = Field(default=0.1)
    llm_max_tokens: int = Field(default=300)
    llm_timeout_seconds: float = Field(default=30.0)

    # WhatsApp Cloud API
    whatsapp_access_token: str
    whatsapp_phone_number_id: str
    whatsapp_verify_token: str
    whatsapp_api_base: str = Field(default="https://graph.facebook.com")
    whatsapp_api_version: str = Field(default="v21.0")
    whatsapp_timeout_seconds: float = Field(default=30.0)

    # Session supervision
    reconnect_delay_seconds: float = Field(default=3.0)
    session_health_interval_seconds: float = Field(default=60.0)

    # Business Rules Configuration
    currency_code: str = Field(default="UGX")
    date_locale: str = Field(default="en-UG")
    business_timezone: str = Field(default="Africa/Kampala")
    payment_method_tag: str = Field(default="whatsapp_bot")
    tenant_match_policy: Literal["first", "prompt"] = Field(default="first")
    receipt_tmp_dir: str = Field(default="/tmp")

    # Inbound dedupe
    inbound_dedupe_enabled: bool = Field(default=True)
    inbound_dedupe_ttl_seconds: int = Field(default=86400)
    inbound_dedupe_max_entries: int = Field(default=10000)

    @field_validator("llm_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("LLM temperature must be between 0.0 and 2.0")
        return v

    @field_validator("business_timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("reconnect_delay_seconds", "session_health_interval_seconds")
    @classmethod
    def validate_positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Intervals must be positive")
        return v

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
