"""API error classes.

HTTP status codes and error codes for the auth API. Every APIError is
rendered by the handler in main.py as {"error": {code, message, details}}.
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "UNAUTHORIZED").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Use for missing or empty required fields and rejected uploads.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when no valid bearer token is provided.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class InvalidOrExpiredCodeError(APIError):
    """No live verification code matched (401).

    Security: Raised alike for a wrong code, an expired code and an
    unknown email.
    """

    def __init__(self) -> None:
        super().__init__(
            code="INVALID_OR_EXPIRED_CODE",
            message="Invalid or expired code",
            status_code=401,
        )


class StoreError(APIError):
    """User directory store failure (500).

    Raised by the repository when the underlying database call fails.
    The message is collaborator-defined.
    """

    def __init__(self, message: str = "User store unavailable") -> None:
        super().__init__(
            code="STORE_ERROR",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )


class DeliveryError(Exception):
    """Email delivery failed.

    Not an APIError: delivery is best-effort, so this is logged by the
    caller and never turned into an HTTP response.
    """
