"""API-related constants."""

# HTTP Headers
CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
AUTHORIZATION_HEADER = "Authorization"
BEARER_PREFIX = "bearer "

# Routing
API_PREFIX = "/api"

# Security
DEFAULT_HSTS_MAX_AGE = 31536000  # 1 year in seconds

# Envelope messages
MSG_VALIDATION_FAILED = "Validation failed"
MSG_NOT_FOUND = "Not found"
MSG_INTERNAL_ERROR = "Internal server error"
MSG_RATE_LIMITED = "Too many requests, please try again later."
