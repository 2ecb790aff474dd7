"""
Domain-specific exceptions.

Error kinds raised while talking to the billing API and while publishing
the catalog document.
"""


class CatalogError(Exception):
    """Base exception for catalog generator errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize catalog error.

        Args:
            message: Error message describing the issue.
        """
        self.message = message
        super().__init__(self.message)


class ApiError(CatalogError):
    """
    Exception raised when a remote billing API call fails.

    Attributes:
        scope: API scope the call was issued under (guest, client, admin).
        method: Remote method name.
        status_code: HTTP status of the most recent attempt (0 if none).
    """

    def __init__(
        self,
        message: str,
        scope: str,
        method: str,
        status_code: int = 0,
    ) -> None:
        """
        Initialize API error.

        Args:
            message: Error message.
            scope: API scope.
            method: Remote method name.
            status_code: HTTP status code of the last attempt.
        """
        super().__init__(message)
        self.scope = scope
        self.method = method
        self.status_code = status_code


class TransportError(ApiError):
    """Connection, timeout or TLS failure."""
    pass


class ProtocolError(ApiError):
    """Non-JSON or otherwise malformed response body."""
    pass


class ApplicationError(ApiError):
    """HTTP status >= 400 or an ``error`` member in the response."""
    pass


class ExhaustedFallbackError(ApiError):
    """Raised when no method alias was available to try."""
    pass


class ConfigError(CatalogError):
    """Exception raised when required configuration is missing."""
    pass


class PublishError(CatalogError):
    """Exception raised when the catalog document cannot be written."""

    def __init__(self, path: str, reason: str) -> None:
        """
        Initialize publish error.

        Args:
            path: Destination path of the document.
            reason: The reason for the failure.
        """
        super().__init__(f"Failed to write output file {path}: {reason}")
        self.path = path
        self.reason = reason
