"""
Fitness Tracker settings, read from the environment (and .env) with
pydantic-settings. Names are case-insensitive: DATABASE_URL, SECRET_KEY,
OPENAI_API_KEY, PLAN_REPAIR_MAX_CHARS, ...
"""
from typing import List, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Service / build metadata
    app_name: str = "Fitness Tracker API"
    app_version: str = "1.0.0"
    git_commit: Optional[str] = None
    build_date: Optional[str] = None
    debug: bool = False
    log_level: str = "INFO"

    # Storage: postgresql://... in production, sqlite:///./fittrack.db locally
    database_url: str

    # JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Comma-separated, e.g. CORS_ORIGINS="http://localhost:5173,http://localhost:3000"
    cors_origins_str: str = Field(
        default="http://localhost:5173,http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    # Plan generation (OpenAI)
    openai_api_key: Optional[str] = None
    model_id: Optional[str] = None  # falls back to gpt-4.1
    plan_temperature: float = 0.7
    plan_max_tokens: int = 16000

    # Model answers longer than this go straight to strict parsing, unrepaired
    plan_repair_max_chars: int = 200_000

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_origins_str.split(",") if o.strip()]


settings = Settings()
