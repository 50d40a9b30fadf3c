"""API v1 Router."""
from fastapi import APIRouter

from simplishare.api.v1 import users, stores, offers

api_router = APIRouter(prefix="/api/v1")

# Include all route modules
api_router.include_router(users.router)
api_router.include_router(stores.router)
api_router.include_router(offers.router)

__all__ = ["api_router"]
