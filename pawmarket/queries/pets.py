"""
Pet listing queries.
"""

from typing import Any, Dict, List, Optional
from loguru import logger
from pydantic import ValidationError

from ..schemas.listing import NewPetListing, Pet, SellerSummary
from ..utils.backend_client import BackendClient, get_backend
from ..utils.helpers import matches_search, utc_now_iso
from .vaccines import delete_pet_vaccines, get_pet_vaccine_names

TABLE = "pets"


def parse_pets(rows: List[Dict[str, Any]]) -> List[Pet]:
    """Build Pet objects from rows, skipping rows that do not fit the schema."""
    pets = []
    for row in rows:
        try:
            pets.append(Pet(**row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed pet row {row.get('id')}: {e}")
    return pets


async def _attach_sellers(pets: List[Pet], backend: BackendClient) -> List[Pet]:
    """Join the public seller profile onto each pet."""
    seller_ids = sorted({pet.seller_id for pet in pets if pet.seller_id})
    if not seller_ids:
        return pets

    rows = await backend.select(
        "profiles",
        in_filters={"id": seller_ids},
        fields=["full_name", "avatar_url", "rating"],
    )
    sellers = {
        row["id"]: SellerSummary(**{k: v for k, v in row.items() if v is not None})
        for row in rows
    }

    return [
        pet.model_copy(update={"profiles": sellers.get(pet.seller_id)}) if pet.seller_id else pet
        for pet in pets
    ]


async def get_pets(
    filters: Optional[Dict[str, Any]] = None,
    backend: Optional[BackendClient] = None,
) -> List[Pet]:
    """
    Fetch pet listings for the marketplace grid, newest first.

    Args:
        filters: Optional ``category`` and ``search`` (name or breed) filters
        backend: Backend to query (defaults to the shared backend)

    Returns:
        List of Pet objects with their seller profiles attached
    """
    backend = backend or get_backend()
    filters = filters or {}

    equality = {}
    if filters.get("category"):
        equality["category"] = filters["category"]

    rows = await backend.select(
        TABLE, filters=equality, order_by="created_at", descending=True
    )
    pets = parse_pets(rows)

    search = (filters.get("search") or "").strip()
    if search:
        pets = [pet for pet in pets if matches_search(search, pet.name, pet.breed)]

    logger.info(f"Fetched {len(pets)} pets (filters={filters})")
    return await _attach_sellers(pets, backend)


async def get_pet(pet_id: str, backend: Optional[BackendClient] = None) -> Optional[Pet]:
    """Fetch a single pet listing, or None if it does not exist."""
    backend = backend or get_backend()
    row = await backend.get(TABLE, pet_id)
    if row is None:
        return None
    return Pet(**row)


async def get_user_pets(seller_id: str, backend: Optional[BackendClient] = None) -> List[Pet]:
    """
    Fetch the listings of one seller, newest first, with vaccine names.

    Args:
        seller_id: Profile ID of the seller
        backend: Backend to query (defaults to the shared backend)

    Returns:
        List of Pet objects
    """
    backend = backend or get_backend()
    rows = await backend.select(
        TABLE, filters={"seller_id": seller_id}, order_by="created_at", descending=True
    )

    pets = []
    for pet in parse_pets(rows):
        names = await get_pet_vaccine_names(pet.id, backend=backend)
        pets.append(pet.model_copy(update={"vaccines": names}))
    return pets


async def create_pet(
    seller_id: str,
    listing: NewPetListing,
    image_url: str = "",
    backend: Optional[BackendClient] = None,
) -> Pet:
    """Insert a new pet listing owned by the seller."""
    backend = backend or get_backend()
    data = {
        **listing.model_dump(mode="json"),
        "seller_id": seller_id,
        "created_at": utc_now_iso(),
        "image_url": image_url,
    }
    row = await backend.insert(TABLE, data)
    logger.info(f"Created pet listing {row['id']} for seller {seller_id}")
    return Pet(**row)


async def delete_pet(pet_id: str, backend: Optional[BackendClient] = None) -> bool:
    """Delete a pet listing and its vaccine links."""
    backend = backend or get_backend()
    deleted = await backend.delete(TABLE, {"id": pet_id})
    if deleted:
        await delete_pet_vaccines(pet_id, backend=backend)
    logger.info(f"Deleted pet listing {pet_id}" if deleted else f"Pet listing {pet_id} not found")
    return bool(deleted)
