"""Utility modules for PawMarket."""

from .backend_client import BackendClient, BackendError, FirestoreBackend, MemoryBackend, get_backend
from .validators import validate_pet_listing, validate_service_listing, validate_profile_update
from .helpers import filter_by_price_range, format_pet_card, format_service_card

__all__ = [
    "BackendClient",
    "BackendError",
    "FirestoreBackend",
    "MemoryBackend",
    "get_backend",
    "validate_pet_listing",
    "validate_service_listing",
    "validate_profile_update",
    "filter_by_price_range",
    "format_pet_card",
    "format_service_card",
]
