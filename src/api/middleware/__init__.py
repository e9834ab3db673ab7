"""FastAPI middleware package for cross-cutting request/response concerns.

- **SecurityHeadersMiddleware**: Adds security headers (HSTS, X-Frame-Options, etc.)
- **RequestContextMiddleware**: Manages request and correlation IDs
- **RequestLoggingMiddleware**: Structured logging with performance tracking
- **error_handler**: Exception handlers that render the error envelope

Middleware order, outermost first: security headers, CORS, request context,
request logging, rate limiting.
"""
