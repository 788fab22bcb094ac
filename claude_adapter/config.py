"""
Configuration Management Module

Configures adapter parameters via environment variables or .env file.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Adapter Configuration Class

    All configuration items can be overridden by environment variables, with names matching fields (uppercase).
    """

    # Application Config
    APP_NAME: str = "claude-adapter"
    DEBUG: bool = False

    # Calling Convention
    # "native" forwards tools as function definitions, "xml" injects tool instructions into the system prompt
    TOOL_CALLING_MODE: Literal["native", "xml"] = "native"

    # Backend Config
    # Used as the provider label of usage and error records
    BACKEND_BASE_URL: str = ""

    # Model Tier Mapping
    # When set, requested models containing the tier name are sent to the backend as this model
    MODEL_OPUS: Optional[str] = None
    MODEL_SONNET: Optional[str] = None
    MODEL_HAIKU: Optional[str] = None

    # max_tokens Rewrite
    # Clients send max_tokens=1 to warm prompt caches; several backends reject it
    MAX_TOKENS_REWRITE_FROM: int = 1
    MAX_TOKENS_REWRITE_TO: int = 32

    # Assistant Prefill Detection
    PREFILL_TOKENS: List[str] = ["{", "[", "```", '{"', "[{"]
    PREFILL_MAX_LENGTH: int = 2
    PREFILL_OPEN_TAGS: List[str] = ["<tool_code"]

    # Streaming Tool ID Cache
    # Shared across streams; the oldest half is dropped once the size is reached
    TOOL_ID_CACHE_SIZE: int = 10000

    # Usage/Error Recording
    RECORD_USAGE: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get adapter configuration (Singleton)

    Returns:
        Settings: Adapter configuration instance
    """
    return Settings()
