"""
SQLAlchemy models for the SimpliShare application.
Import all models here to ensure they're registered with SQLAlchemy.
"""
from simplishare.models.user import User, UserRole
from simplishare.models.store import Store
from simplishare.models.offer import Offer
from simplishare.models.image import OfferImageFile, OfferImageChunk

__all__ = [
    "User",
    "UserRole",
    "Store",
    "Offer",
    "OfferImageFile",
    "OfferImageChunk",
]
