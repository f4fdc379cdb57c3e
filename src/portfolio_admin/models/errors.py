"""Error taxonomy raised by the portfolio admin client."""

from typing import Any


class PortfolioError(Exception):
    """Base class for every failure surfaced by the admin client."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class TransportError(PortfolioError):
    """Network unreachable, connection reset or timeout."""

    def __init__(self, message: str = "Unable to reach the server") -> None:
        super().__init__(message, status=None)


class AuthError(PortfolioError):
    """Expired or invalid credentials (401/403)."""

    def __init__(self, message: str = "Your session has expired. Please sign in again.", status: int = 401) -> None:
        super().__init__(message, status=status)


class ValidationError(PortfolioError):
    """Payload rejected by the backend.

    ``field_errors`` mirrors the backend's ``fieldErrors`` list:
    ``[{"field": ..., "message": ...}, ...]``.
    """

    def __init__(
        self,
        message: str = "The request was rejected",
        status: int = 400,
        field_errors: list[dict[str, Any]] | None = None,
    ) -> None:
        super().__init__(message, status=status)
        self.field_errors = field_errors or []


class NotFoundError(PortfolioError):
    """Stale id: the resource was deleted elsewhere."""

    def __init__(self, resource_id: str | None = None, message: str = "Resource not found") -> None:
        super().__init__(message, status=404)
        self.resource_id = resource_id


class ServerError(PortfolioError):
    """Backend failure (5xx)."""

    def __init__(self, message: str = "Server error", status: int = 500) -> None:
        super().__init__(message, status=status)


class ReconciliationError(PortfolioError):
    """A created bullet could not be correlated back to its draft entry."""

    def __init__(self, content: str) -> None:
        super().__init__(f"Created bullet not found in server response: {content!r}")
        self.content = content
