"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./finance_tracker.db"

    # Identity provider (Supabase-compatible auth API)
    identity_provider_url: str = "http://localhost:54321"
    identity_api_key: str = ""

    # LLM parsing
    parser_backend: str = "heuristic"  # heuristic | llm
    llm_base_url: str = "https://api.openai.com/v1"
    llm_api_key: str = ""
    llm_model: str = "gpt-4o-mini"
    llm_max_retries: int = 3
    llm_backoff_base: float = 1.0  # Exponential backoff base in seconds
    parse_timeout_seconds: float = 30.0

    # Service
    service_name: str = "finance-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 10.0

    # Analytics
    default_trend_window_days: int = 30


settings = Settings()
