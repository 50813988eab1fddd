"""
Pets Page - marketplace grid of pet listings.
Holds the filter state, the loaded pets and the user's favorite pets.
"""

from typing import Any, Dict, List, Optional
from loguru import logger

from ..config import settings
from ..schemas.favorite import ItemType
from ..schemas.listing import Pet, PetCategory, PriceRange
from ..queries.pets import get_pets
from ..utils.backend_client import BackendClient, BackendError, get_backend
from ..utils.helpers import filter_by_price_range, format_pet_card
from .favorites import FavoritesToggle

CATEGORIES = [
    {"id": "all", "name": "All Pets"},
    {"id": PetCategory.DOGS.value, "name": "Dogs"},
    {"id": PetCategory.CATS.value, "name": "Cats"},
    {"id": PetCategory.BIRDS.value, "name": "Birds"},
    {"id": PetCategory.FISH.value, "name": "Fish"},
    {"id": PetCategory.RABBITS.value, "name": "Rabbits"},
    {"id": PetCategory.HAMSTERS.value, "name": "Hamsters"},
]

PRICE_RANGES = [
    {"id": PriceRange.ALL.value, "name": "All Prices"},
    {"id": PriceRange.UNDER_500.value, "name": "Under $500"},
    {"id": PriceRange.FROM_500_TO_1000.value, "name": "$500 - $1,000"},
    {"id": PriceRange.FROM_1000_TO_2000.value, "name": "$1,000 - $2,000"},
    {"id": PriceRange.OVER_2000.value, "name": "$2,000+"},
]


class PetsPage:
    """
    State behind the pets grid for one visitor.

    Category and search are applied by the backend query; the price range is
    applied to the loaded pets, so changing it does not refetch.
    """

    def __init__(self, user_id: Optional[str] = None, backend: Optional[BackendClient] = None):
        """Initialize the page with default filters."""
        self.backend = backend or get_backend()
        self.user_id = user_id

        self.search_query = ""
        self.selected_category = "all"
        self.price_range = PriceRange.ALL

        self.pets: List[Pet] = []
        self.favorites = FavoritesToggle(user_id, ItemType.PET, backend=self.backend)
        self.loading = False
        self.error: Optional[str] = None

    async def set_filters(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        price_range: Optional[str] = None,
    ) -> bool:
        """
        Apply filter changes; category or search changes reload the page.

        Returns:
            True if the page was reloaded
        """
        if price_range is not None:
            self.price_range = PriceRange(price_range)

        changed = False
        if category is not None and category != self.selected_category:
            self.selected_category = category
            changed = True
        if search is not None and search != self.search_query:
            self.search_query = search
            changed = True

        if changed:
            await self.refresh()
        return changed

    async def refresh(self) -> None:
        """Reload pets and favorites."""
        await self.fetch_pets()
        await self.fetch_favorites()

    async def fetch_pets(self) -> List[Pet]:
        """Query pets for the current category and search text."""
        filters: Dict[str, Any] = {}
        if self.selected_category != "all":
            filters["category"] = self.selected_category
        if self.search_query.strip():
            filters["search"] = self.search_query.strip()

        self.loading = True
        try:
            self.pets = await get_pets(filters, backend=self.backend)
            self.error = None
        except BackendError as e:
            logger.error(f"Error fetching pets: {e}")
            self.error = str(e)
        finally:
            self.loading = False

        return self.pets

    async def fetch_favorites(self) -> List[str]:
        return await self.favorites.load()

    async def toggle_favorite(self, pet_id: str) -> Optional[bool]:
        """
        Toggle a pet in the user's favorites.

        Returns:
            The new membership, or None if the toggle failed (see ``error``)
        """
        try:
            return await self.favorites.toggle(pet_id)
        except BackendError as e:
            logger.error(f"Error toggling favorite pet {pet_id}: {e}")
            self.error = str(e)
            return None

    @property
    def filtered_pets(self) -> List[Pet]:
        return filter_by_price_range(self.pets, self.price_range)

    def render(self) -> Dict[str, Any]:
        """Build the page payload: filters, cards and counts."""
        filtered = self.filtered_pets
        return {
            "filters": {
                "search": self.search_query,
                "category": self.selected_category,
                "price_range": self.price_range.value,
            },
            "categories": CATEGORIES,
            "price_ranges": PRICE_RANGES,
            "pets": [
                format_pet_card(pet, is_favorite=self.favorites.is_favorite(pet.id)).model_dump(mode="json")
                for pet in filtered
            ],
            "showing": len(filtered),
            "total": len(self.pets),
            "summary": f"Showing {len(filtered)} of {len(self.pets)} pets",
            "empty_message": None if filtered else "No pets found. Try adjusting your search criteria.",
            "placeholder_image": settings.default_pet_image_url,
            "error": self.error,
        }
