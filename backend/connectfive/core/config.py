from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Search .env in CWD first, then parent dir.
        # Works when pytest runs from backend/ (finds ../.env)
        # and when Docker mounts .env at the container working dir.
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # --- Stat store (required, no default) ---
    DATABASE_URL: str

    # --- Statistics ---
    UPSERT_MAX_ATTEMPTS: int = 5
    LEADERBOARD_DEFAULT_COUNT: int = 5
    LEADERBOARD_MAX_COUNT: int = 50

    # --- Rate limits (slowapi syntax) ---
    STATS_WRITE_RATE_LIMIT: str = "60/minute"
    CLIENT_LOG_RATE_LIMIT: str = "120/minute"

    # --- Observability ---
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # development | staging | production

    # --- CORS (comma-separated string parsed into a list) ---
    CORS_ORIGINS: str = (
        "http://localhost:5000,https://localhost:5001,http://localhost:5173"
    )

    @field_validator("UPSERT_MAX_ATTEMPTS")
    @classmethod
    def attempts_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("UPSERT_MAX_ATTEMPTS must be at least 1")
        return v

    @field_validator("LEADERBOARD_DEFAULT_COUNT", "LEADERBOARD_MAX_COUNT")
    @classmethod
    def count_must_not_be_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Leaderboard counts cannot be negative")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def log_level_must_be_valid(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}")
        return v.upper()

    def get_cors_origins(self) -> List[str]:
        """Parse comma-separated CORS_ORIGINS into a list."""
        return [
            origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()
        ]

    def is_dev_environment(self) -> bool:
        return self.ENVIRONMENT.lower() in {"development", "dev", "testing", "test"}


settings = Settings()
