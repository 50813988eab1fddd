"""Query layer: thin passthrough calls to the backend tables and storage."""

from .pets import get_pets, get_pet, get_user_pets, create_pet, delete_pet
from .services import (
    get_services,
    get_service,
    get_user_services,
    create_service,
    delete_service,
    get_provider_profiles,
)
from .favorites import get_user_favorites, add_to_favorites, remove_from_favorites
from .profiles import get_profile, ensure_profile, update_profile, get_contact_info
from .vaccines import list_vaccines, add_pet_vaccines, get_pet_vaccine_names
from .storage import upload_listing_image

__all__ = [
    "get_pets",
    "get_pet",
    "get_user_pets",
    "create_pet",
    "delete_pet",
    "get_services",
    "get_service",
    "get_user_services",
    "create_service",
    "delete_service",
    "get_provider_profiles",
    "get_user_favorites",
    "add_to_favorites",
    "remove_from_favorites",
    "get_profile",
    "ensure_profile",
    "update_profile",
    "get_contact_info",
    "list_vaccines",
    "add_pet_vaccines",
    "get_pet_vaccine_names",
    "upload_listing_image",
]
