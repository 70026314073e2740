"""Application configuration read from the environment via pydantic-settings.

get_settings() is cached, so there is a single Settings instance per process.
Every non-secret setting has a default that works against a local MongoDB.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings from environment variables (or a .env file)."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Database
    db_uri: str = "mongodb://localhost:27017"
    db_name: str = "ContestHubDB"

    # Auth
    access_token_secret: str = "change-me"
    access_token_algorithm: str = "HS256"
    access_token_expire_days: int = 365

    # Payments
    stripe_secret_key: str = "sk_test_placeholder"
    payment_currency: str = "usd"

    # Server
    port: int = 5000
    node_env: str = "development"
    cors_origins: List[str] = ["http://localhost:5173", "http://localhost:5174"]
    production_origins: List[str] = []

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def allowed_origins(self) -> List[str]:
        if self.is_production:
            return self.production_origins
        return self.cors_origins

    @property
    def cookie_samesite(self) -> str:
        return "none" if self.is_production else "strict"


@lru_cache
def get_settings() -> Settings:
    return Settings()
