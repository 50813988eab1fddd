"""
Services Page - marketplace grid of pet service listings.
"""

from typing import Any, Dict, List, Optional
from loguru import logger

from ..schemas.favorite import ItemType
from ..schemas.listing import Service
from ..schemas.profile import ProviderSummary
from ..queries.services import get_provider_profiles, get_services
from ..utils.backend_client import BackendClient, BackendError, get_backend
from ..utils.helpers import format_service_card
from .favorites import FavoritesToggle

SERVICE_CATEGORIES = [
    {"id": "all", "name": "All Services"},
    {"id": "veterinary", "name": "Veterinary"},
    {"id": "grooming", "name": "Grooming"},
    {"id": "training", "name": "Training"},
    {"id": "boarding", "name": "Boarding"},
    {"id": "walking", "name": "Dog Walking"},
    {"id": "pet_sitting", "name": "Pet Sitting"},
]


class ServicesPage:
    """State behind the services grid for one visitor."""

    def __init__(self, user_id: Optional[str] = None, backend: Optional[BackendClient] = None):
        self.backend = backend or get_backend()
        self.user_id = user_id

        self.search_query = ""
        self.selected_service = "all"

        self.services: List[Service] = []
        self.providers: Dict[str, ProviderSummary] = {}
        self.favorites = FavoritesToggle(user_id, ItemType.SERVICE, backend=self.backend)
        self.loading = False
        self.error: Optional[str] = None

    async def set_filters(self, category: Optional[str] = None, search: Optional[str] = None) -> bool:
        """Apply filter changes; any change reloads the page. Returns True if it did."""
        changed = False
        if category is not None and category != self.selected_service:
            self.selected_service = category
            changed = True
        if search is not None and search != self.search_query:
            self.search_query = search
            changed = True

        if changed:
            await self.refresh()
        return changed

    async def refresh(self) -> None:
        await self.fetch_services()
        await self.fetch_providers()
        await self.favorites.load()

    async def fetch_services(self) -> List[Service]:
        """Query services for the current category and search text."""
        filters: Dict[str, Any] = {}
        if self.selected_service != "all":
            filters["service"] = self.selected_service
        if self.search_query.strip():
            filters["search"] = self.search_query.strip()

        self.loading = True
        try:
            self.services = await get_services(filters, backend=self.backend)
            self.error = None
        except BackendError as e:
            logger.error(f"Error fetching services: {e}")
            self.error = str(e)
        finally:
            self.loading = False

        return self.services

    async def fetch_providers(self) -> Dict[str, ProviderSummary]:
        """Load provider profiles for the services on screen."""
        provider_ids = [service.provider_id for service in self.services if service.provider_id]
        try:
            self.providers = await get_provider_profiles(provider_ids, backend=self.backend)
        except BackendError as e:
            logger.error(f"Error fetching provider profiles: {e}")
            self.providers = {}
        return self.providers

    async def toggle_favorite(self, service_id: str) -> Optional[bool]:
        try:
            return await self.favorites.toggle(service_id)
        except BackendError as e:
            logger.error(f"Error toggling favorite service {service_id}: {e}")
            self.error = str(e)
            return None

    def render(self) -> Dict[str, Any]:
        return {
            "filters": {
                "search": self.search_query,
                "category": self.selected_service,
            },
            "categories": SERVICE_CATEGORIES,
            "services": [
                format_service_card(
                    service,
                    providers=self.providers,
                    is_favorite=self.favorites.is_favorite(service.id),
                ).model_dump(mode="json")
                for service in self.services
            ],
            "total": len(self.services),
            "empty_message": None if self.services else "No services found. Try adjusting your search criteria.",
            "error": self.error,
        }
