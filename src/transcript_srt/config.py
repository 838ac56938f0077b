"""Configuration via environment variables."""

from enum import Enum

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings


class Transport(str, Enum):
    STDIO = "stdio"
    STREAMABLE_HTTP = "streamable-http"


class Settings(BaseSettings):
    model_config = {"env_prefix": "TRANSCRIPT_SRT_"}

    google_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("TRANSCRIPT_SRT_GOOGLE_API_KEY", "GOOGLE_API_KEY"),
    )
    api_base_url: str = "https://generativelanguage.googleapis.com"
    model: str = "gemini-2.5-flash"
    request_timeout: float = 60.0

    poll_interval_seconds: float = 5.0
    max_retries: int = 3
    initial_retry_delay_seconds: float = 1.0

    default_language: str = "English"
    upload_chunk_size: int = 1024 * 1024

    host: str = "0.0.0.0"
    port: int = 8401
    transport: Transport = Transport.STDIO
    log_level: str = "INFO"


settings = Settings()
