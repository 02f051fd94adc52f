from pathlib import Path
from typing import Literal, Optional, List

from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from llm_gateway.schemas import Provider


class DeepSeekSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="DEEPSEEK_", extra="ignore")
    api_key: Optional[SecretStr] = None
    url: str = "https://api.deepseek.com/chat/completions"
    prompt_model: str = "deepseek-chat"
    translation_model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 1024
    timeout_s: float = 10.0


class OpenAISettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="OPENAI_", extra="ignore", populate_by_name=True
    )
    # OPENAI_KIA_API_KEY is the legacy name still set on older deployments
    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "OPENAI_KIA_API_KEY"),
    )
    responses_url: str = "https://api.openai.com/v1/responses"
    chat_url: str = "https://api.openai.com/v1/chat/completions"
    prompt_model: str = "gpt-4.1-mini"
    translation_model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_output_tokens: int = 1024
    timeout_s: float = 25.0


class GroqSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="GROQ_", extra="ignore", populate_by_name=True
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("GROQ_API_KEY", "GROQ_KIA_API_KEY"),
    )
    url: str = "https://api.groq.com/openai/v1/chat/completions"
    prompt_model: str = "llama-3.1-8b-instant"
    translation_model: str = "llama-3.1-8b-instant"
    temperature: float = 0.7
    max_tokens: int = 1024
    timeout_s: float = 10.0


class Settings(BaseSettings):

    project_root: Path = Path(".").resolve()

    # ---- app/runtime ----
    env: Literal["dev", "staging", "prod"] = "dev"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    verify_ssl: bool = True

    # ---- API server configuration ----
    api_host: str = "127.0.0.1"  # localhost for dev, 0.0.0.0 for docker/prod
    api_port: int = 8000
    api_reload: bool = True  # Auto-reload on code changes (dev only)
    api_workers: int = 1
    cors_origins: List[str] = ["*"]
    bearer_token: Optional[SecretStr] = None

    # ---- routing ----
    llm_provider_order: List[Provider] = [Provider.DEEPSEEK, Provider.OPENAI]
    translation_provider_order: List[Provider] = [
        Provider.DEEPSEEK,
        Provider.GROQ,
        Provider.OPENAI,
    ]
    chat_provider_order: List[Provider] = [Provider.DEEPSEEK, Provider.OPENAI, Provider.GROQ]
    translation_temperature: float = 0.2
    connect_timeout_s: float = 5.0

    # ---- review generation ----
    review_min_words: int = 500

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="APP_",      # APP_ENV, APP_LOG_LEVEL, etc.
        env_nested_delimiter='__',
        extra="ignore"
    )


def get_settings() -> Settings:
    """Accessor kept as a function so tests can patch it."""
    return Settings()


def get_deepseek_settings() -> DeepSeekSettings:
    return DeepSeekSettings()


def get_openai_settings() -> OpenAISettings:
    return OpenAISettings()


def get_groq_settings() -> GroqSettings:
    return GroqSettings()
