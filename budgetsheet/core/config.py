from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict

from budgetsheet.services.money import DEFAULT_USD_TO_KHR

STORAGE_BACKENDS = {"sheets", "memory"}
ENVIRONMENTS = {"development", "test", "production"}


class Settings(BaseSettings):
    """Application settings loaded from environment with defaults.

    Environment variable mapping follows pydantic-settings rules (e.g. APP_NAME,
    ENVIRONMENT, BYPASS_AUTH, GOOGLE_CLIENT_ID, STORAGE_BACKEND, USD_TO_KHR_RATE).
    """

    # Basic app metadata
    app_name: str = "Budget Sheet"
    debug: bool = False
    version: str = "0.1.0"
    environment: str = "development"

    # Authentication. The bypass injects a fixed dev identity and is refused
    # when environment == "production".
    bypass_auth: bool = False
    google_client_id: str = ""
    google_client_secret: str = ""
    google_redirect_uri: str = "http://localhost:8000/api/auth/google/callback"
    frontend_url: str = "http://localhost:5173"
    cors_origins: List[str] = ["http://localhost:5173"]
    identity_cache_ttl_seconds: int = 300

    # Currency. Static demo rate, not a market feed.
    usd_to_khr_rate: float = DEFAULT_USD_TO_KHR
    default_locale: str = "en-US"

    # Persistence
    storage_backend: str = "sheets"
    spreadsheet_prefix: str = "MMMS"
    http_timeout_seconds: float = 10.0

    # Budget alerts fire when spending reaches this percentage of the limit
    budget_alert_threshold: int = 80

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    def init_post_load(self) -> None:
        """Validate enumerated values."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unsupported storage_backend '{self.storage_backend}'. Allowed: {STORAGE_BACKENDS}"
            )
        if self.environment not in ENVIRONMENTS:
            raise ValueError(
                f"Unsupported environment '{self.environment}'. Allowed: {ENVIRONMENTS}"
            )
        if self.usd_to_khr_rate <= 0:
            raise ValueError("usd_to_khr_rate must be positive")
        if not 1 <= self.budget_alert_threshold <= 100:
            raise ValueError("budget_alert_threshold must be within 1..100")

    @property
    def dev_bypass_active(self) -> bool:
        return self.bypass_auth and self.environment != "production"


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    settings.init_post_load()
    return settings
