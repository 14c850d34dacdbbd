# quotedesk/config.py
import os
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # === General ===
    app_env: str = "local"  # local | development | production

    # === Database ===
    database_url: str = "sqlite:///./quotedesk.db"

    # === Auth (JWT) ===
    jwt_secret: str = Field("dev_secret_change_me_please_0123456789", description="HS256 signing key")
    jwt_exp_hours: int = 24

    # === Logging ===
    log_level: str = "INFO"

    # === CORS ===
    allowed_origins: list[str] = ["http://localhost:5173"]

    # === Company / documents ===
    company_name: str = "MG MASTERGREEN"
    company_tax_id: str = "36.347.401/0001-99"
    company_tagline: str = "Especialista em Grama Sintética, Capachos de Vinil e Piso Tátil"
    default_warranty_text: str = "1 ano de garantia de fábrica"
    quotation_validity_days: int = 30

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton Settings instance with simple per-environment overrides."""
    s = Settings()

    env = os.getenv("ENVIRONMENT", s.app_env).lower()
    if env == "production":
        s.log_level = "WARNING"
    elif env == "development":
        s.log_level = "DEBUG"

    return s


settings = get_settings()
