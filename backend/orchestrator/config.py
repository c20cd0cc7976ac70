"""Configuration and environment variables"""
from functools import lru_cache
from pydantic_settings import BaseSettings
from typing import Optional
from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Provider credentials
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None

    # OpenAI (chat completions)
    openai_model: str = "gpt-4-turbo-preview"
    openai_base_url: str = "https://api.openai.com/v1"
    openai_temperature: float = 0.3
    openai_max_tokens: int = 4000

    # Anthropic (messages)
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    anthropic_max_tokens: int = 16000

    # Per-call HTTP timeout in seconds
    llm_timeout: float = 120.0

    # Pipeline Configuration
    chunk_threshold: int = 10000
    chunk_size: int = 8000
    inter_call_delay: float = 0.5  # seconds between sequential creator calls
    draft_excerpt_chars: int = 25000
    source_excerpt_chars: int = 30000

    # Input handling
    compression_marker: str = "LZ:"
    max_upload_bytes: int = 20000000  # 20MB

    # CORS Settings
    cors_origins: list = ["*"]

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    def validate_provider_keys(self) -> None:
        """Raise ConfigurationError unless both provider keys look usable"""
        if not self.openai_api_key or not self.openai_api_key.startswith("sk-"):
            raise ConfigurationError(
                "OpenAI API key not configured correctly",
                details="Set OPENAI_API_KEY in the environment (should start with 'sk-')"
            )
        if not self.anthropic_api_key or not self.anthropic_api_key.startswith("sk-ant-"):
            raise ConfigurationError(
                "Anthropic API key not configured correctly",
                details="Set ANTHROPIC_API_KEY in the environment (should start with 'sk-ant-')"
            )


@lru_cache()
def get_settings() -> Settings:
    """Settings are read once per process"""
    return Settings()
