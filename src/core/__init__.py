"""Core package for shared application functionality.

- **config**: Centralized configuration management with environment support
- **context**: Request context, correlation and request ID management
- **exceptions**: Structured exception hierarchy with error codes
- **error_context**: Redaction of credentials before logging
- **logging**: Loguru setup and fatal error hooks
- **observability**: Distributed tracing with OpenTelemetry
- **pagination**: Page/limit normalization for list endpoints
- **security**: Password hashing and session tokens
"""
