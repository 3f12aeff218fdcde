import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

DEFAULT_PORT = 3000
DEFAULT_MAX_RECORDS = 10000
DEFAULT_CORS_MAX_AGE = 3600


def _positive_int(name: str, default: int) -> int:
    """Unset, unparseable or non-positive values fall back to the default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _optional_int(name: str) -> Optional[int]:
    """Unset or unparseable values read as None."""
    raw = os.getenv(name)
    if not raw or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class ServiceSettings:
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    app_env: str = "development"
    max_records_per_request: int = DEFAULT_MAX_RECORDS
    cors_origin: str = "*"
    cors_max_age: int = DEFAULT_CORS_MAX_AGE
    random_seed: Optional[int] = None
    log_level: str = "INFO"
    request_log_file: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


def load_settings() -> ServiceSettings:
    """
    Reads service settings from the environment (and a .env file,
    when present). NODE_ENV is honoured when APP_ENV is unset.
    """
    load_dotenv(find_dotenv(usecwd=True))

    return ServiceSettings(
        port=_positive_int("PORT", DEFAULT_PORT),
        host=os.getenv("HOST", "0.0.0.0"),
        app_env=os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development",
        max_records_per_request=_positive_int("MAX_RECORDS_PER_REQUEST", DEFAULT_MAX_RECORDS),
        cors_origin=os.getenv("CORS_ORIGIN", "*"),
        cors_max_age=_positive_int("CORS_MAX_AGE", DEFAULT_CORS_MAX_AGE),
        random_seed=_optional_int("RANDOM_SEED"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        request_log_file=os.getenv("REQUEST_LOG_FILE") or None,
    )
