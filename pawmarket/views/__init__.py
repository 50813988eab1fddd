"""Page state for the marketplace screens."""

from .favorites import FavoritesToggle, aggregate_favorites, load_favorites_overview, partition_favorites
from .pets_page import PetsPage
from .services_page import ServicesPage
from .profile_page import ProfilePage, ProfileTab

__all__ = [
    "FavoritesToggle",
    "aggregate_favorites",
    "load_favorites_overview",
    "partition_favorites",
    "PetsPage",
    "ServicesPage",
    "ProfilePage",
    "ProfileTab",
]
