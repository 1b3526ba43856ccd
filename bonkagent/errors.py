"""Error taxonomy shared by the gateway, wallet reader, session clients and HTTP layer."""

from typing import Any


class DashboardError(Exception):
    """Base for every failure surfaced to a dashboard user."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(DashboardError):
    """Bad input rejected before any network call."""


class InvalidAddress(ValidationError):
    """Wallet address is not a canonical base58 public key."""

    def __init__(self, address: str) -> None:
        super().__init__("Invalid wallet address", details=address)
        self.address = address


class IllegalTransition(ValidationError):
    """Command is not valid from the task's current state. Nothing was sent upstream."""

    def __init__(self, command: str, status: str) -> None:
        super().__init__(f"Cannot {command}: task is {status}")
        self.command = command
        self.status = status


class UnsupportedOperation(ValidationError):
    """Provider does not offer the requested capability."""


class TransportError(DashboardError):
    """External API could not be reached (connect error, timeout, broken response)."""


class UpstreamDomainError(DashboardError):
    """External API answered but reported a failure (non-2xx, JSON-RPC error)."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code


class DisconnectSignal(DashboardError):
    """Live-view surface lost its connection. Not a data error: the task may still run."""

    DEFAULT_MESSAGE = "Browser session disconnected. The session may have ended."

    def __init__(self, message: str | None = None, source: str | None = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE, details=source)
        self.source = source
