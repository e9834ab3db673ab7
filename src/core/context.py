"""Request context management utilities for correlation and request IDs."""

import uuid
from contextvars import ContextVar

# Context variables for storing request identifiers across async boundaries
_correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)
_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)


class RequestContext:
    """Manages request context using contextvars for async-safe storage.

    Correlation IDs may be supplied by an upstream caller and span services;
    request IDs identify a single request and are echoed in every response
    envelope.
    """

    @staticmethod
    def set_correlation_id(correlation_id: str) -> None:
        """Set the correlation ID for the current context."""
        _correlation_id_var.set(correlation_id)

    @staticmethod
    def get_correlation_id() -> str | None:
        """Get the correlation ID from the current context."""
        return _correlation_id_var.get()

    @staticmethod
    def set_request_id(request_id: str) -> None:
        """Set the request ID for the current context."""
        _request_id_var.set(request_id)

    @staticmethod
    def get_request_id() -> str | None:
        """Get the request ID from the current context."""
        return _request_id_var.get()

    @staticmethod
    def clear() -> None:
        """Clear all context variables.

        This should be called at the end of a request to ensure clean
        state for the next request.
        """
        _correlation_id_var.set(None)
        _request_id_var.set(None)


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for request tracking.

    Returns:
        str: A string representation of a UUID4.
    """
    return str(uuid.uuid4())


def generate_request_id() -> str:
    """Generate a unique request ID for individual request tracking.

    Returns:
        str: A prefixed UUID4 string in format 'req-<uuid4>'.

    Examples:
        >>> request_id = generate_request_id()
        >>> request_id.startswith('req-')
        True
        >>> len(request_id)
        40
    """
    return f"req-{uuid.uuid4()}"


def generate_error_id() -> str:
    """Generate an identifier for an unexpected server-side failure.

    Distinct from the request ID so operators can search logs for a single
    failure without exposing anything else about the request.
    """
    return f"err-{uuid.uuid4()}"
