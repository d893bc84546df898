"""Exception hierarchy for vault payload generation."""

from typing import Any


class PayloadError(Exception):
    """Base exception for all payload generation errors."""

    code = "payload_error"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(PayloadError):
    """Raised when the entry-point parameters are missing or malformed."""

    code = "invalid_input"

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.field = field
        self.value = value


class NoOptionsAvailableError(PayloadError):
    """Raised when the aggregator offers no deposit or withdraw option."""

    code = "no_options"

    def __init__(self, message: str, vault_id: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.vault_id = vault_id


class NoQuotesAvailableError(PayloadError):
    """Raised when the aggregator returns no quote for the chosen option."""

    code = "no_quotes"

    def __init__(self, message: str, vault_id: str | None = None, details: dict | None = None):
        super().__init__(message, details)
        self.vault_id = vault_id


class SigningUnavailableError(PayloadError):
    """Raised when a write is requested from a read-only account context."""

    code = "signing_unavailable"

    def __init__(self, method: str, address: str | None = None):
        super().__init__(
            "No signing available in data-only mode",
            details={"method": method, "address": address},
        )
        self.method = method
        self.address = address


class UpstreamFailureError(PayloadError):
    """Raised when a node or aggregator call itself fails."""

    code = "upstream_failure"

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        details: dict | None = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint


class PipelineCancelledError(PayloadError):
    """Raised when a run is abandoned by its caller between stages."""

    code = "cancelled"

    def __init__(self, stage: str):
        super().__init__(f"Run cancelled before stage {stage}", details={"stage": stage})
        self.stage = stage
