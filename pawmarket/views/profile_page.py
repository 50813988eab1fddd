"""
Profile Page - the signed-in user's area.

Tabs cover an overview, the user's pet and service listings, the listings the
user favorited, and profile settings. Listing creation uploads the optional
image first, then inserts the row, then links the selected vaccines.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
from loguru import logger
from pydantic import ValidationError

from ..config import settings
from ..errors import AlertError
from ..queries.pets import create_pet, delete_pet, get_user_pets
from ..queries.profiles import ensure_profile, get_contact_info, get_profile, update_profile
from ..queries.services import create_service, delete_service, get_user_services
from ..queries.storage import upload_listing_image
from ..queries.vaccines import add_pet_vaccines, list_vaccines
from ..schemas.favorite import FavoritesOverview
from ..schemas.listing import ImageUpload, NewPetListing, NewServiceListing, Pet, PetCategory, Service, Vaccine
from ..schemas.profile import AuthenticatedUser, ContactInfo, Profile, ProfileUpdate
from ..utils.backend_client import BackendClient, BackendError, get_backend
from ..utils.helpers import format_member_since, format_pet_card, format_service_card
from ..utils.validators import validate_image_file
from .favorites import load_favorites_overview


class ProfileTab(str, Enum):
    """Tabs of the profile page."""
    OVERVIEW = "overview"
    PETS = "pets"
    SERVICES = "services"
    FAVORITES = "favorites"
    SETTINGS = "settings"


TAB_NAMES = {
    ProfileTab.OVERVIEW: "Overview",
    ProfileTab.PETS: "My Pets",
    ProfileTab.SERVICES: "My Services",
    ProfileTab.FAVORITES: "Favorites",
    ProfileTab.SETTINGS: "Settings",
}


class ProfilePage:
    """State behind the profile area for one signed-in user."""

    def __init__(self, user: AuthenticatedUser, backend: Optional[BackendClient] = None):
        """Initialize empty page state for the user."""
        self.backend = backend or get_backend()
        self.user = user

        self.active_tab = ProfileTab.OVERVIEW
        self.profile = Profile(id=user.id, email=user.email)
        self.user_pets: List[Pet] = []
        self.user_services: List[Service] = []
        self.available_vaccines: List[Vaccine] = []
        self.favorites = FavoritesOverview()

        self.is_editing = False
        self.show_add_pet_form = False
        self.show_add_service_form = False
        self.adding_pet = False
        self.adding_service = False
        self.contact_info: Optional[ContactInfo] = None
        self.error: Optional[str] = None

    async def open(self) -> None:
        """Load everything the page shows."""
        try:
            await ensure_profile(self.user, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error ensuring profile for {self.user.id}: {e}")

        await self.fetch_user_profile()
        await self.fetch_user_pets()
        await self.fetch_user_services()
        await self.fetch_vaccines()
        await self.fetch_favorites()

    def set_tab(self, tab: str) -> ProfileTab:
        self.active_tab = ProfileTab(tab)
        return self.active_tab

    async def fetch_user_profile(self) -> Profile:
        try:
            profile = await get_profile(self.user.id, backend=self.backend)
            if profile is not None:
                self.profile = profile
        except BackendError as e:
            logger.error(f"Error fetching profile: {e}")
        return self.profile

    async def fetch_user_pets(self) -> List[Pet]:
        try:
            self.user_pets = await get_user_pets(self.user.id, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error fetching pets: {e}")
        return self.user_pets

    async def fetch_user_services(self) -> List[Service]:
        try:
            self.user_services = await get_user_services(self.user.id, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error fetching services: {e}")
        return self.user_services

    async def fetch_vaccines(self) -> List[Vaccine]:
        try:
            self.available_vaccines = await list_vaccines(backend=self.backend)
        except BackendError as e:
            logger.error(f"Error fetching vaccines: {e}")
        return self.available_vaccines

    async def fetch_favorites(self) -> FavoritesOverview:
        """Recompute the favorites tab from the backend."""
        try:
            self.favorites = await load_favorites_overview(self.user.id, backend=self.backend)
        except BackendError as e:
            logger.warning(f"Could not load favorites for {self.user.id}: {e}")
            self.favorites = FavoritesOverview()
        return self.favorites

    def start_editing(self) -> None:
        self.is_editing = True

    def cancel_editing(self) -> None:
        self.is_editing = False

    def toggle_add_pet_form(self) -> bool:
        self.show_add_pet_form = not self.show_add_pet_form
        return self.show_add_pet_form

    def toggle_add_service_form(self) -> bool:
        self.show_add_service_form = not self.show_add_service_form
        return self.show_add_service_form

    async def update_profile(self, update: ProfileUpdate) -> bool:
        """
        Save the settings form.

        Returns:
            True if saved; on failure the page stays in edit mode
        """
        try:
            self.profile = await update_profile(self.user.id, update, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error updating profile: {e}")
            self.error = str(e)
            return False

        self.is_editing = False
        self.error = None
        return True

    async def delete_pet(self, pet_id: str) -> bool:
        try:
            deleted = await delete_pet(pet_id, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error deleting pet: {e}")
            return False

        await self.fetch_user_pets()
        return deleted

    async def delete_service(self, service_id: str) -> bool:
        try:
            deleted = await delete_service(service_id, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error deleting service: {e}")
            return False

        await self.fetch_user_services()
        return deleted

    async def _upload_image(self, bucket: str, image: Optional[ImageUpload]) -> str:
        if image is None:
            return ""

        is_valid, error_msg = validate_image_file(image.file_name, image.size)
        if not is_valid:
            raise AlertError(error_msg)

        return await upload_listing_image(
            bucket, image.file_name, image.content, image.content_type, backend=self.backend
        )

    async def add_pet(
        self,
        listing: NewPetListing,
        image: Optional[ImageUpload] = None,
        vaccine_ids: Sequence[str] = (),
    ) -> Pet:
        """
        Create a pet listing owned by the user.

        Args:
            listing: Validated add-pet form
            image: Optional photo, stored in the pets bucket
            vaccine_ids: Catalogue IDs of the vaccines the pet has had

        Returns:
            The created Pet

        Raises:
            AlertError: If any step fails; the form is left as it was
        """
        self.adding_pet = True
        try:
            await ensure_profile(self.user, backend=self.backend)
            image_url = await self._upload_image("pets", image)
            pet = await create_pet(self.user.id, listing, image_url=image_url, backend=self.backend)
            await add_pet_vaccines(pet.id, vaccine_ids, backend=self.backend)
        except AlertError:
            raise
        except (BackendError, ValidationError) as e:
            logger.error(f"Error adding pet: {e}")
            raise AlertError("Failed to add pet!") from e
        finally:
            self.adding_pet = False

        self.show_add_pet_form = False
        await self.fetch_user_pets()
        return pet

    async def add_service(
        self,
        listing: NewServiceListing,
        image: Optional[ImageUpload] = None,
    ) -> Service:
        """Create a service listing owned by the user; failures raise AlertError."""
        self.adding_service = True
        try:
            await ensure_profile(self.user, backend=self.backend)
            image_url = await self._upload_image("services", image)
            service = await create_service(
                self.user.id, listing, image_url=image_url, backend=self.backend
            )
        except AlertError:
            raise
        except (BackendError, ValidationError) as e:
            logger.error(f"Error adding service: {e}")
            raise AlertError("Failed to add service!") from e
        finally:
            self.adding_service = False

        self.show_add_service_form = False
        await self.fetch_user_services()
        return service

    async def upload_avatar(self, image: ImageUpload) -> Profile:
        """Store a new profile picture and point the profile at it."""
        try:
            avatar_url = await self._upload_image("avatars", image)
            self.profile = await update_profile(
                self.user.id, ProfileUpdate(avatar_url=avatar_url), backend=self.backend
            )
        except BackendError as e:
            logger.error(f"Error uploading avatar: {e}")
            raise AlertError("Failed to upload avatar!") from e
        return self.profile

    async def show_contact(self, owner_id: str) -> Optional[ContactInfo]:
        """Load a listing owner's contact card; None if it cannot be shown."""
        try:
            self.contact_info = await get_contact_info(owner_id, backend=self.backend)
        except (BackendError, ValidationError) as e:
            logger.error(f"Error fetching contact info for {owner_id}: {e}")
            self.contact_info = None
        return self.contact_info

    def render(self, tab: Optional[str] = None) -> Dict[str, Any]:
        """Build the payload for the header, the tab bar and one tab."""
        if tab is not None:
            self.set_tab(tab)

        payload: Dict[str, Any] = {
            "header": {
                "name": self.profile.full_name or self.user.email,
                "avatar_url": self.profile.avatar_url or None,
                "location": self.profile.location or None,
                "member_since": format_member_since(self.user.created_at or self.profile.created_at),
                "stats": {
                    "pets": len(self.user_pets),
                    "services": len(self.user_services),
                    "favorites": self.favorites.total,
                },
            },
            "tabs": [{"id": t.value, "name": TAB_NAMES[t]} for t in ProfileTab],
            "active_tab": self.active_tab.value,
            "error": self.error,
        }

        if self.active_tab == ProfileTab.OVERVIEW:
            limit = settings.overview_preview_limit
            payload["overview"] = {
                "bio": self.profile.bio or None,
                "complete_profile_prompt": not self.profile.bio,
                "pets": [format_pet_card(p).model_dump(mode="json") for p in self.user_pets[:limit]],
                "services": [format_service_card(s).model_dump(mode="json") for s in self.user_services[:limit]],
            }
        elif self.active_tab == ProfileTab.PETS:
            payload["pets"] = [format_pet_card(p).model_dump(mode="json") for p in self.user_pets]
            payload["pet_categories"] = [c.value for c in PetCategory]
            payload["vaccines"] = [v.model_dump() for v in self.available_vaccines]
            payload["show_add_pet_form"] = self.show_add_pet_form
        elif self.active_tab == ProfileTab.SERVICES:
            payload["services"] = [format_service_card(s).model_dump(mode="json") for s in self.user_services]
            payload["show_add_service_form"] = self.show_add_service_form
        elif self.active_tab == ProfileTab.FAVORITES:
            payload["favorites"] = {
                "pets": [format_pet_card(p, is_favorite=True).model_dump(mode="json") for p in self.favorites.pets],
                "services": [
                    format_service_card(s, is_favorite=True).model_dump(mode="json")
                    for s in self.favorites.services
                ],
            }
        elif self.active_tab == ProfileTab.SETTINGS:
            payload["settings"] = {
                **self.profile.model_dump(
                    mode="json",
                    include={"full_name", "phone", "location", "bio", "avatar_url", "user_type"},
                ),
                "email": self.user.email,
                "is_editing": self.is_editing,
            }

        return payload
