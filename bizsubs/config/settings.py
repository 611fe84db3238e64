from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""
    supabase_service_role_key: Optional[str] = None  # Preferred for data access; queries still filter by user_id

    # App
    app_name: str = "bizsubs-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    frontend_url: str = "http://localhost:3000"  # Target for auth confirmation redirects

    # Business defaults
    trial_days: int = 14
    default_tax_rate: float = 30.0
    default_currency: str = "USD"
    default_financial_year_end: str = "12-31"

    # Read cache
    cache_ttl_seconds: int = 300
    cache_max_entries: int = 2000

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()
