"""API routers, mounted under ``/api`` by ``create_app``."""

from fastapi import APIRouter

from src.api.constants import API_PREFIX
from src.api.routes import accounts, auth, invoices, tax_profiles

api_router = APIRouter(prefix=API_PREFIX)
api_router.include_router(auth.router)
api_router.include_router(accounts.router)
api_router.include_router(tax_profiles.router)
api_router.include_router(invoices.router)

__all__ = ["api_router"]
