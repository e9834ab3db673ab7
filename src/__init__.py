"""Ledgerly - authenticated bookkeeping API for accounts, tax profiles and invoices.

Architecture Overview:
- **API Layer**: FastAPI routers, middleware and request/response schemas
- **Services Layer**: Authentication use-cases (registration, login)
- **Core Layer**: Configuration, security primitives and cross-cutting concerns
- **Infrastructure Layer**: PostgreSQL persistence through async SQLAlchemy

Every response, successful or not, is wrapped in the same JSON envelope and
carries the request ID it was served under.
"""
