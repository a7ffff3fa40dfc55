from __future__ import annotations

from pydantic import AnyUrl, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8-sig",
        case_sensitive=False,
        extra="ignore",
    )

    SUPABASE_URL: AnyUrl
    SUPABASE_SERVICE_ROLE_KEY: str
    GEMINI_API_KEY: SecretStr = SecretStr("")
    GEMINI_MODEL: str = "gemini-2.5-flash"
    APP_ENV: str = "local"
    FRONTEND_CORS_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
    )
    PUBLIC_BASE_URL: str = "http://localhost:3000"

    # route protection
    PROTECTED_PATH_PREFIX: str = "/recipes"
    LOGIN_PATH: str = "/login"

    # search input debounce, per channel
    SEARCH_QUERY_DEBOUNCE_MS: int = Field(default=300, ge=0)
    SEARCH_FACET_DEBOUNCE_MS: int = Field(default=0, ge=0)

    # delete the parent recipe when a child insert fails
    SUBMIT_COMPENSATE_ON_FAILURE: bool = True


settings = Settings()
