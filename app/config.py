from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ── Known default credentials (must never be used in production) ──
_INSECURE_DB_PASSWORDS = {"postgres", ""}


class Settings(BaseSettings):
    APP_NAME: str = "Feedback Triage"
    APP_ENV: str = "development"
    LOG_LEVEL: str = ""  # empty: DEBUG in development, INFO in production/staging
    API_PREFIX: str = "/api"

    # CORS
    BACKEND_CORS_ORIGINS: str = ""

    # Database（DATABASE_URL 優先，否則由 POSTGRES_* 組合）
    DATABASE_URL: Optional[str] = None
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "feedback_triage"

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 min
    DB_ECHO: bool = False
    SLOW_QUERY_THRESHOLD_MS: int = 500
    DB_AUTO_CREATE: bool = False  # create tables on startup (local demo)

    # OpenAI（用於 feedback 分類）
    OPENAI_API_KEY: str = ""
    OPENAI_BASE_URL: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"
    OPENAI_TEMPERATURE: float = 0.2
    OPENAI_TIMEOUT: float = 60.0       # seconds
    TRIAGE_MAX_TOKENS: int = 450

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @model_validator(mode="after")
    def _validate_production_config(self) -> "Settings":
        """Block startup if critical settings are left at defaults in production / staging."""
        if self.APP_ENV in ("production", "staging"):
            if not self.DATABASE_URL and self.POSTGRES_PASSWORD in _INSECURE_DB_PASSWORDS:
                raise ValueError(
                    "POSTGRES_PASSWORD is set to default 'postgres'. "
                    "Set a strong password or DATABASE_URL in .env or environment."
                )
            if not self.OPENAI_API_KEY:
                raise ValueError(
                    "OPENAI_API_KEY is empty. Feedback triage cannot reach the model."
                )
        return self

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.BACKEND_CORS_ORIGINS.split(",") if o.strip()]

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "production"

    @property
    def is_staging(self) -> bool:
        return self.APP_ENV == "staging"


settings = Settings()
