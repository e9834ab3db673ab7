"""Structured exception hierarchy for consistent error handling.

Key components:
- **ErrorCode enum**: Standardized error identifiers for programmatic handling
- **Severity enum**: Error classification for monitoring and alerting
- **LedgerlyError**: Base exception with rich context and fingerprinting
- **Specialized exceptions**: One subclass per client-visible outcome

Every exception raised on purpose by application code derives from
LedgerlyError. The API error handler maps each subclass to exactly one HTTP
status; anything else that escapes a request handler is reported as an
internal error.
"""

import hashlib
import traceback
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for the Ledgerly application."""

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    """An unexpected internal error occurred in the system."""

    RATE_LIMITED = "RATE_LIMITED"
    """The client exceeded its request budget."""

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    """Input validation failed due to invalid or malformed data."""

    # Resource errors
    NOT_FOUND = "NOT_FOUND"
    """The requested resource could not be found."""

    CONFLICT = "CONFLICT"
    """The request conflicts with existing data (duplicate unique value)."""

    # Authentication errors
    UNAUTHORIZED = "UNAUTHORIZED"
    """Authentication failed."""

    MISSING_TOKEN = "MISSING_TOKEN"
    """No session token was supplied."""

    INVALID_TOKEN = "INVALID_TOKEN"
    """The session token is malformed or its signature does not verify."""

    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    """The session token verified but is past its expiry."""


class Severity(Enum):
    """Severity levels used for log levels and alerting."""

    LOW = "LOW"
    """Expected errors caused by client input."""

    MEDIUM = "MEDIUM"
    """Errors that may affect some features but not critical ops."""

    HIGH = "HIGH"
    """Errors impacting security, critical functionality or data integrity."""

    CRITICAL = "CRITICAL"
    """Errors requiring immediate attention."""


class LedgerlyError(Exception):
    """Base exception class for all Ledgerly application exceptions.

    Args:
        error_code: Unique identifier for the error type (string or ErrorCode enum)
        message: Human-readable error message, safe to show to clients
        severity: Severity level of the error (defaults to MEDIUM)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        error_code: str | ErrorCode,
        message: str,
        severity: Severity = Severity.MEDIUM,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.error_code = (
            error_code.value if isinstance(error_code, ErrorCode) else error_code
        )
        self.message = message
        self.severity = severity
        self.context = context or {}
        self.cause = cause

        # Capture stack trace at creation time, excluding this frame
        self.stack_trace = traceback.format_stack()[:-1]
        self.fingerprint = self._generate_fingerprint()

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def _generate_fingerprint(self) -> str:
        """Generate a fingerprint for error grouping.

        Creates a hash based on the error type and the location where it was
        raised, allowing similar errors to be grouped in monitoring systems.

        Returns:
            str: A hash string for error grouping
        """
        max_frames = 5
        relevant_frames = self.stack_trace[-max_frames:]

        fingerprint_data = f"{self.__class__.__name__}:{self.error_code}"
        for frame in relevant_frames:
            if "site-packages" not in frame and "src/" in frame:
                lines = frame.strip().split("\n")
                if lines:
                    fingerprint_data += f":{lines[0]}"

        return hashlib.sha256(fingerprint_data.encode()).hexdigest()[:16]

    @property
    def is_expected(self) -> bool:
        """Whether this error occurs during normal operation (LOW or MEDIUM)."""
        return self.severity in (Severity.LOW, Severity.MEDIUM)

    @property
    def should_alert(self) -> bool:
        """Whether this error should trigger alerts (HIGH or CRITICAL)."""
        return self.severity in (Severity.HIGH, Severity.CRITICAL)

    def __str__(self) -> str:
        """Return the error code and message."""
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        """Return a detailed representation of the exception."""
        class_name = self.__class__.__name__
        context_str = f", context={self.context}" if self.context else ""
        return (
            f"{class_name}(error_code='{self.error_code}', "
            f"message='{self.message}', severity={self.severity.value}{context_str})"
        )


class ValidationError(LedgerlyError):
    """Exception raised when input validation fails.

    Args:
        message: Description of the validation failure
        error_code: Error code (defaults to VALIDATION_ERROR)
        context: Additional context, e.g. ``{"details": [...]}``
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.VALIDATION_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class NotFoundError(LedgerlyError):
    """Exception raised when a requested resource cannot be found.

    Also used for resources that exist but lie outside the caller's scope,
    so that the two cases are indistinguishable to clients.

    Args:
        message: Description of what resource was not found
        error_code: Error code (defaults to NOT_FOUND)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.NOT_FOUND,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class ConflictError(LedgerlyError):
    """Exception raised when a write violates a uniqueness constraint."""

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.CONFLICT,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.LOW, context, cause)


class UnauthorizedError(LedgerlyError):
    """Exception raised when authentication fails.

    Args:
        message: Description of the authentication failure
        error_code: Error code (defaults to UNAUTHORIZED)
        context: Additional context information about the error
        cause: The original exception that caused this error
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.UNAUTHORIZED,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.MEDIUM, context, cause)


class MissingTokenError(UnauthorizedError):
    """No session token was presented on a protected route."""

    def __init__(self, message: str = "Missing token") -> None:
        super().__init__(message, ErrorCode.MISSING_TOKEN)


class InvalidTokenError(UnauthorizedError):
    """The presented token is malformed, forged or names no valid subject."""

    def __init__(
        self, message: str = "Invalid token", cause: Exception | None = None
    ) -> None:
        super().__init__(message, ErrorCode.INVALID_TOKEN, cause=cause)


class TokenExpiredError(UnauthorizedError):
    """The presented token verified but has expired.

    Clients see the same message as for an invalid token; only the error
    code differs.
    """

    def __init__(
        self, message: str = "Invalid token", cause: Exception | None = None
    ) -> None:
        super().__init__(message, ErrorCode.TOKEN_EXPIRED, cause=cause)


class InternalError(LedgerlyError):
    """Exception raised for unexpected failures of a dependency.

    The message is logged but never sent to clients.
    """

    def __init__(
        self,
        message: str,
        error_code: str | ErrorCode = ErrorCode.INTERNAL_ERROR,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(error_code, message, Severity.HIGH, context, cause)
