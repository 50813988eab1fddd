"""
Favorites toggle and favorites-to-listing aggregation.

The toggle keeps the favorite IDs of one item type for one user and updates
them optimistically after each add or remove. Membership is read from that
local state, never re-queried, so two overlapping toggles on the same item can
both see the old membership; last write wins on the backend.
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, Union
from loguru import logger
from pydantic import ValidationError

from ..errors import AuthenticationRequired
from ..queries.favorites import add_to_favorites, get_user_favorites, remove_from_favorites
from ..queries.pets import get_pet
from ..queries.services import get_service
from ..schemas.favorite import Favorite, FavoritesOverview, ItemType
from ..utils.backend_client import BackendClient, BackendError, get_backend


class FavoritesToggle:
    """Favorite membership for one item type, as seen by one page."""

    def __init__(
        self,
        user_id: Optional[str],
        item_type: Union[ItemType, str],
        backend: Optional[BackendClient] = None,
    ):
        self.user_id = user_id
        self.item_type = ItemType(item_type)
        self.backend = backend or get_backend()
        self.favorite_ids: List[str] = []
        self.loaded = False

    async def load(self) -> List[str]:
        """
        Load the user's favorite IDs of this item type.

        Failures (including a signed-out user) leave the page with no favorites.
        """
        if not self.user_id:
            self.favorite_ids = []
            self.loaded = True
            return self.favorite_ids

        try:
            favorites = await get_user_favorites(
                self.user_id, self.item_type, backend=self.backend
            )
            self.favorite_ids = []
            for favorite in favorites:
                self._remember(favorite.item_id)
        except BackendError as e:
            logger.debug(f"Could not load favorites for {self.user_id}: {e}")
            self.favorite_ids = []

        self.loaded = True
        return self.favorite_ids

    def is_favorite(self, item_id: str) -> bool:
        return item_id in self.favorite_ids

    async def toggle(self, item_id: str) -> bool:
        """
        Add or remove an item depending on the current local membership.

        Returns:
            The membership after the toggle

        Raises:
            AuthenticationRequired: If no user is signed in
            BackendError: If the add or remove fails; local state is unchanged
        """
        if not self.user_id:
            raise AuthenticationRequired("favorites")

        if self.is_favorite(item_id):
            await remove_from_favorites(self.user_id, item_id, self.item_type, backend=self.backend)
            self.favorite_ids = [fid for fid in self.favorite_ids if fid != item_id]
            return False

        await add_to_favorites(self.user_id, item_id, self.item_type, backend=self.backend)
        self._remember(item_id)
        return True

    def _remember(self, item_id: str) -> None:
        if item_id not in self.favorite_ids:
            self.favorite_ids.append(item_id)


def partition_favorites(favorites: Sequence[Favorite]) -> Tuple[List[str], List[str]]:
    """Split favorites into pet IDs and service IDs, keeping backend order."""
    pet_ids = [fav.item_id for fav in favorites if fav.item_type == ItemType.PET]
    service_ids = [fav.item_id for fav in favorites if fav.item_type == ItemType.SERVICE]
    return pet_ids, service_ids


async def _resolve(
    lookup: Callable[..., Awaitable],
    item_id: str,
    item_type: ItemType,
    backend: BackendClient,
):
    try:
        item = await lookup(item_id, backend=backend)
    except (BackendError, ValidationError) as e:
        logger.warning(f"Lookup of favorite {item_type.value} {item_id} failed: {e}")
        return None

    if item is None:
        logger.warning(f"Favorite {item_type.value} {item_id} points at a missing listing")
    return item


async def aggregate_favorites(
    favorites: Sequence[Favorite],
    backend: Optional[BackendClient] = None,
) -> FavoritesOverview:
    """
    Resolve favorite rows to the pets and services they reference.

    Lookups that fail or find nothing are dropped; the rest of the list is
    still returned.

    Args:
        favorites: Favorite rows, in backend order
        backend: Backend to query (defaults to the shared backend)

    Returns:
        FavoritesOverview with pets and services in favorite order
    """
    backend = backend or get_backend()
    pet_ids, service_ids = partition_favorites(favorites)

    pets = await asyncio.gather(
        *(_resolve(get_pet, pid, ItemType.PET, backend) for pid in pet_ids)
    )
    services = await asyncio.gather(
        *(_resolve(get_service, sid, ItemType.SERVICE, backend) for sid in service_ids)
    )

    return FavoritesOverview(
        pets=[pet for pet in pets if pet is not None],
        services=[service for service in services if service is not None],
    )


async def load_favorites_overview(
    user_id: str,
    backend: Optional[BackendClient] = None,
) -> FavoritesOverview:
    """Fetch all of a user's favorites and resolve them to listings."""
    backend = backend or get_backend()
    favorites = await get_user_favorites(user_id, backend=backend)
    overview = await aggregate_favorites(favorites, backend=backend)
    logger.info(
        f"Resolved {overview.total} of {len(favorites)} favorites for user {user_id}"
    )
    return overview
