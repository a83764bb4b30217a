from pydantic import field_validator
from pydantic_settings import BaseSettings


def _strip_inline_comment(value: str) -> str:
    """Strip trailing inline comments that python-dotenv keeps for unquoted values."""
    idx = value.find(" #")
    if idx != -1:
        value = value[:idx]
    return value.strip()


class Settings(BaseSettings):
    # LLM provider
    anthropic_api_key: str = "test-key"
    anthropic_model: str = "claude-haiku-4-5-20251001"
    anthropic_max_tokens: int = 1024
    default_temperature: float = 0.3
    parser_temperature: float = 0.3

    # Flight offers provider (required when USE_REAL_APIS=true)
    duffel_api_key: str = ""
    duffel_base_url: str = "https://api.duffel.com"
    duffel_version: str = "v2"
    duffel_max_offers: int = 20
    duffel_timeout_seconds: float = 30.0

    @field_validator("anthropic_api_key", "duffel_api_key", mode="before")
    @classmethod
    def clean_api_key(cls, v: str) -> str:
        if isinstance(v, str):
            return _strip_inline_comment(v)
        return v

    database_url: str = "sqlite+aiosqlite:///./flight_search.db"
    use_real_apis: bool = False
    max_query_length: int = 500
    log_level: str = "INFO"
    # development | staging | production
    environment: str = "development"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
