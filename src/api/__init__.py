"""HTTP API layer built on FastAPI.

Key components:
- **main**: Application factory and lifecycle management
- **dependencies**: The authentication gate and shared request dependencies
- **routes**: Routers for authentication, accounts, tax profiles and invoices
- **middleware**: Security headers, request context, request logging and
  the envelope-producing error handlers
- **schemas**: Pydantic request/response models and the response envelope
- **utils**: orjson response class and envelope helpers
"""
