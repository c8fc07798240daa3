from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from pydantic import field_validator
from typing import Annotated, Any, ClassVar
import json
import logging
from pathlib import Path


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    PROJECT_NAME: str = "Agency Payments API"
    API_V1_STR: str = "/api/v1"

    # Use an absolute path so running the app from the repo root or backend/
    # resolves the same DB file.
    BASE_DIR: ClassVar[Path] = Path(__file__).resolve().parents[2]
    SQLALCHEMY_DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'agency.db'}"

    # Public checkout pages are served from several hosts; allow all by default.
    CORS_ORIGINS: Annotated[list[str], NoDecode] = ["*"]

    # Fallback origin for checkout redirects when the request has no Origin header
    FRONTEND_URL: str = "http://localhost:5173"

    # Mercado Pago credentials; the active one is picked by agency_settings.payment_mode
    MP_ACCESS_TOKEN: str = ""
    MP_TEST_ACCESS_TOKEN: str = ""
    MP_API_BASE_URL: str = "https://api.mercadopago.com"
    MP_TIMEOUT_SECONDS: float = 10.0
    CHECKOUT_CURRENCY: str = "MXN"

    # Optimistic-lock retries for concurrent confirmations on the same contract
    CONFIRM_MAX_ATTEMPTS: int = 3

    LOG_LEVEL: str = "INFO"
    ENABLE_CONSOLE_TRACING: bool = False
    OTEL_SAMPLER_RATIO: float = 1.0

    # StatsD sink; metrics are dropped when STATSD_HOST is empty
    STATSD_HOST: str = ""
    STATSD_PORT: int = 8125
    METRICS_PREFIX: str = "agency"

    @field_validator("CORS_ORIGINS", mode="before")
    def split_origins(cls, v: Any) -> list[str]:
        """Parse comma-separated or JSON list of origins from environment."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except json.JSONDecodeError:
                pass
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("LOG_LEVEL", mode="before")
    def normalize_log_level(cls, v: Any) -> str:
        level = str(v or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("OTEL_SAMPLER_RATIO")
    def clamp_ratio(cls, v: float) -> float:
        return min(1.0, max(0.0, v))

    @field_validator("MP_ACCESS_TOKEN", "MP_TEST_ACCESS_TOKEN", "FRONTEND_URL", mode="before")
    def strip_strings(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v


def load_settings() -> Settings:
    return Settings()


settings = load_settings()
