"""Custom exception hierarchy for eksward.

All eksward-specific exceptions inherit from EkswardError, enabling
callers to catch every provisioning failure with a single except clause.
"""

from __future__ import annotations


class EkswardError(Exception):
    """Base exception for all eksward errors."""


class ConfigurationError(EkswardError):
    """Raised for invalid configuration or missing required settings."""


class RequestError(EkswardError):
    """Raised when the provider rejects a create, describe or delete call."""

    def __init__(self, operation: str, message: str, code: str | None = None) -> None:
        self.operation = operation
        self.code = code
        prefix = f"{operation} failed"
        if code:
            prefix = f"{prefix} ({code})"
        super().__init__(f"{prefix}: {message}")


class NotFoundError(EkswardError):
    """Raised when a resource or stack output expected to exist is missing."""


class TimeoutError(EkswardError):  # noqa: A001
    """Raised when polling exceeds its deadline without reaching the target status."""

    def __init__(
        self,
        description: str,
        want: str,
        last_status: str | None,
        timeout: float,
    ) -> None:
        self.description = description
        self.want = want
        self.last_status = last_status
        self.timeout = timeout
        super().__init__(
            f"Timeout waiting for {description} to reach {want} after {timeout:.1f}s "
            f"(last status: {last_status})"
        )


class FatalStatusError(EkswardError):
    """Raised when a polled resource reaches a status it cannot recover from."""

    def __init__(self, description: str, status: str) -> None:
        self.description = description
        self.status = status
        super().__init__(f"{description} reached terminal state: {status}")


class InvalidStateError(EkswardError):
    """Raised when a cluster operation is called from the wrong lifecycle state."""

    def __init__(self, operation: str, state: str) -> None:
        self.operation = operation
        self.state = state
        super().__init__(f"Cannot {operation} while cluster is {state}")
