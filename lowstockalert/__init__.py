from .app import create_app
from .exceptions import (
    AlertTimeoutError,
    ClientInputError,
    ConfigurationError,
    LowStockAlertError,
    RepositoryError,
)
from .service import AlertService, AlertState

__all__ = [
    "create_app",
    "AlertService",
    "AlertState",
    "AlertTimeoutError",
    "ClientInputError",
    "ConfigurationError",
    "LowStockAlertError",
    "RepositoryError",
]
