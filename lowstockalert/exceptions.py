"""
Typed exceptions for the low-stock alert pipeline.

Every error carries a machine-readable ``code`` so the HTTP layer can map it
to a response without parsing messages.

    LowStockAlertError
    |
    +-- ClientInputError        -> 400
    +-- RepositoryError         -> 500
    |   +-- AlertTimeoutError   -> 500
    +-- ConfigurationError
"""


class LowStockAlertError(Exception):
    """Base class for all errors raised by this package."""

    code = "LOW_STOCK_ALERT_ERROR"

    def __init__(self, message, code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ClientInputError(LowStockAlertError):
    """The caller supplied a malformed company identifier."""

    code = "INVALID_COMPANY_ID"

    def __init__(self, message, value=None):
        super().__init__(message)
        self.value = value


class RepositoryError(LowStockAlertError):
    """The store could not be reached or queried."""

    code = "REPOSITORY_ERROR"


class AlertTimeoutError(RepositoryError):
    """Per-candidate lookups did not finish within the request timeout."""

    code = "ALERT_TIMEOUT"

    def __init__(self, timeout_seconds, pending):
        super().__init__(
            f"Alert computation exceeded {timeout_seconds}s with {pending} lookups pending"
        )
        self.timeout_seconds = timeout_seconds
        self.pending = pending


class ConfigurationError(LowStockAlertError):
    code = "INVALID_CONFIGURATION"
