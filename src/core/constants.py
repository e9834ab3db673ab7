"""Core application constants."""

# Time constants
MILLISECONDS_PER_SECOND = 1000

# Security and redaction
REDACTED = "[REDACTED]"
SENSITIVE_FIELD_PATTERNS = [
    r".*password.*",
    r".*passwd.*",
    r".*secret.*",
    r".*token.*",
    r".*auth.*",
    r".*cookie.*",
    r".*credential.*",
    r".*session.*",
    r".*bearer.*",
]
SENSITIVE_HEADERS = {
    "authorization",
    "cookie",
    "set-cookie",
    "proxy-authorization",
}

# Largest value a signed 64-bit database integer holds (ids, row offsets)
MAX_DB_INTEGER = 2**63 - 1

# Pagination
DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

# Credentials
MIN_PASSWORD_LENGTH = 12
BCRYPT_MAX_PASSWORD_BYTES = 72
