"""
Favorite queries.

Favorite rows are keyed by ``Favorite.row_id`` (the percent-encoded user, item
type and item ID joined with ``:``), so the backend holds at most one row per
(user, item, type) no matter how often an item is added.
"""

from typing import List, Optional, Union
from loguru import logger

from ..schemas.favorite import Favorite, ItemType
from ..utils.backend_client import BackendClient, BackendError, get_backend
from ..utils.helpers import utc_now_iso

TABLE = "favorites"


async def get_user_favorites(
    user_id: str,
    item_type: Optional[Union[ItemType, str]] = None,
    backend: Optional[BackendClient] = None,
) -> List[Favorite]:
    """
    Fetch a user's favorites in the order the backend returns them.

    Args:
        user_id: Profile ID of the owner
        item_type: Restrict to pets or services
        backend: Backend to query (defaults to the shared backend)

    Returns:
        List of Favorite rows
    """
    backend = backend or get_backend()
    filters = {"user_id": user_id}
    if item_type is not None:
        filters["item_type"] = ItemType(item_type).value

    rows = await backend.select(TABLE, filters=filters, order_by="created_at")
    return [Favorite(**row) for row in rows]


async def add_to_favorites(
    user_id: str,
    item_id: str,
    item_type: Union[ItemType, str],
    backend: Optional[BackendClient] = None,
) -> Favorite:
    """
    Add an item to the user's favorites; adding it again returns the existing row.

    Raises:
        BackendError: If the row stored under the favorite's ID belongs to a
            different (user, item, type)
    """
    backend = backend or get_backend()
    item_type = ItemType(item_type)
    row_id = Favorite.row_id(user_id, item_id, item_type)

    existing = await backend.get(TABLE, row_id)
    if existing is not None:
        favorite = Favorite(**existing)
        if not favorite.matches(user_id, item_id, item_type):
            raise BackendError(
                f"Favorite row {row_id} belongs to {favorite.user_id}, not {user_id}",
                code="conflict",
            )
        logger.debug(f"{item_type.value} {item_id} already in favorites of {user_id}")
        return favorite

    row = await backend.insert(
        TABLE,
        {
            "user_id": user_id,
            "item_id": item_id,
            "item_type": item_type.value,
            "created_at": utc_now_iso(),
        },
        row_id=row_id,
    )
    logger.info(f"Added {item_type.value} {item_id} to favorites of {user_id}")
    return Favorite(**row)


async def remove_from_favorites(
    user_id: str,
    item_id: str,
    item_type: Union[ItemType, str],
    backend: Optional[BackendClient] = None,
) -> bool:
    """Remove an item from the user's favorites; returns whether a row was deleted."""
    backend = backend or get_backend()
    item_type = ItemType(item_type)
    row_id = Favorite.row_id(user_id, item_id, item_type)

    existing = await backend.get(TABLE, row_id)
    if existing is None:
        return False
    if not Favorite(**existing).matches(user_id, item_id, item_type):
        logger.warning(f"Favorite row {row_id} does not belong to {user_id}; not removing it")
        return False

    deleted = await backend.delete(TABLE, {"id": row_id})
    logger.info(f"Removed {item_type.value} {item_id} from favorites of {user_id}")
    return bool(deleted)
