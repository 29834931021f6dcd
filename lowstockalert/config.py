import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigurationError

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Business Logic Assumptions ---
# "Recent sales activity" is the SALE ledger kind over a trailing window.
# Both are assumptions of the whole system, so both are configurable.
DEFAULT_SALES_WINDOW_DAYS = 30
DEFAULT_SALE_TRANSACTION_KIND = "SALE"

# --- Fan-out limits ---
DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///lowstock.db"
    sales_window_days: int = DEFAULT_SALES_WINDOW_DAYS
    sale_transaction_kind: str = DEFAULT_SALE_TRANSACTION_KIND
    max_workers: int = DEFAULT_MAX_WORKERS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    log_file: Optional[Path] = None


def _positive(name, raw, cast):
    try:
        value = cast(raw)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def load_settings(env_file=None) -> Settings:
    """Build Settings from the process environment (and ``.env`` if present)."""
    load_dotenv(env_file or BASE_DIR / ".env")

    log_file = os.getenv("LOG_FILE")
    return Settings(
        database_url=os.getenv("DATABASE_URL", Settings.database_url),
        sales_window_days=_positive(
            "SALES_WINDOW_DAYS",
            os.getenv("SALES_WINDOW_DAYS", DEFAULT_SALES_WINDOW_DAYS),
            int,
        ),
        sale_transaction_kind=os.getenv(
            "SALE_TRANSACTION_KIND", DEFAULT_SALE_TRANSACTION_KIND
        ).strip().upper(),
        max_workers=_positive(
            "ALERT_MAX_WORKERS", os.getenv("ALERT_MAX_WORKERS", DEFAULT_MAX_WORKERS), int
        ),
        timeout_seconds=_positive(
            "ALERT_TIMEOUT_SECONDS",
            os.getenv("ALERT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            float,
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file) if log_file else None,
    )
