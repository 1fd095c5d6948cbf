from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_KNOWLEDGE_DIR = Path(__file__).resolve().parent.parent / "knowledge"


class Settings(BaseSettings):
    # Ignore unrelated env keys so the dashboard's shared .env can be reused.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "PizzaWorld AI Assistant"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:4200,http://127.0.0.1:4200"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_anon_key: Optional[str] = Field(default=None, alias="SUPABASE_ANON_KEY")
    supabase_timeout_seconds: float = Field(default=15.0, alias="SUPABASE_TIMEOUT_SECONDS")

    openai_api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    openai_base_url: str = Field(default="https://api.openai.com/v1", alias="OPENAI_BASE_URL")
    openai_model: str = Field(default="gpt-5-mini", alias="OPENAI_MODEL")
    openai_temperature: float = Field(default=0.2, alias="OPENAI_TEMPERATURE")
    openai_max_output_tokens: int = Field(default=500, alias="OPENAI_MAX_OUTPUT_TOKENS")
    openai_timeout_seconds: float = Field(default=30.0, alias="OPENAI_TIMEOUT_SECONDS")
    assistant_max_response_chars: int = Field(default=1000, alias="ASSISTANT_MAX_RESPONSE_CHARS")

    context_critical_ttl_seconds: float = Field(default=30.0, alias="CONTEXT_CRITICAL_TTL_SECONDS")
    context_standard_ttl_seconds: float = Field(default=60.0, alias="CONTEXT_STANDARD_TTL_SECONDS")
    context_critical_categories: str = Field(
        default="analytics", alias="CONTEXT_CRITICAL_CATEGORIES"
    )
    context_sweep_threshold: int = Field(default=50, alias="CONTEXT_SWEEP_THRESHOLD")
    context_sweep_probability: float = Field(default=0.1, alias="CONTEXT_SWEEP_PROBABILITY")

    chat_history_cap: int = Field(default=20, ge=1, alias="CHAT_HISTORY_CAP")
    chat_history_window: int = Field(default=10, ge=0, alias="CHAT_HISTORY_WINDOW")
    prompt_message_max_chars: int = Field(default=500, alias="PROMPT_MESSAGE_MAX_CHARS")
    prompt_snippet_max_chars: int = Field(default=1500, alias="PROMPT_SNIPPET_MAX_CHARS")

    revenue_ceiling: float = Field(default=1_000_000_000.0, alias="REVENUE_CEILING")
    orders_ceiling: int = Field(default=100_000_000, alias="ORDERS_CEILING")
    avg_order_value_ceiling: float = Field(default=1_000.0, alias="AVG_ORDER_VALUE_CEILING")
    avg_order_value_tolerance: float = Field(default=0.10, alias="AVG_ORDER_VALUE_TOLERANCE")

    knowledge_paths: str = Field(
        default=",".join(
            str(DEFAULT_KNOWLEDGE_DIR / name)
            for name in ("faq.md", "business-operations.md", "technical-guide.md")
        ),
        alias="KNOWLEDGE_PATHS",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]


def get_critical_categories() -> frozenset[str]:
    settings = get_settings()
    return frozenset(
        item.strip().lower()
        for item in settings.context_critical_categories.split(",")
        if item.strip()
    )


def get_knowledge_paths() -> list[Path]:
    settings = get_settings()
    return [Path(item.strip()) for item in settings.knowledge_paths.split(",") if item.strip()]
