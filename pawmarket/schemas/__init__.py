"""Data schemas and models for PawMarket."""

from .listing import (
    Pet,
    Service,
    PetCategory,
    PetStatus,
    ServiceStatus,
    PriceRange,
    NewPetListing,
    NewServiceListing,
    Vaccine,
    ImageUpload,
)
from .profile import AuthenticatedUser, Profile, ProfileUpdate, ContactInfo, UserType
from .favorite import Favorite, FavoritesOverview, ItemType

__all__ = [
    "Pet",
    "Service",
    "PetCategory",
    "PetStatus",
    "ServiceStatus",
    "PriceRange",
    "NewPetListing",
    "NewServiceListing",
    "Vaccine",
    "ImageUpload",
    "AuthenticatedUser",
    "Profile",
    "ProfileUpdate",
    "ContactInfo",
    "UserType",
    "Favorite",
    "FavoritesOverview",
    "ItemType",
]
