"""
Vaccine catalogue and pet-vaccine link queries.
"""

from typing import Iterable, List, Optional
from loguru import logger

from ..schemas.listing import Vaccine
from ..utils.backend_client import BackendClient, get_backend

TABLE = "vaccines"
LINK_TABLE = "pet_vaccines"


async def list_vaccines(backend: Optional[BackendClient] = None) -> List[Vaccine]:
    """Fetch the vaccine catalogue ordered by name."""
    backend = backend or get_backend()
    rows = await backend.select(TABLE, order_by="name")
    return [Vaccine(**row) for row in rows]


async def add_pet_vaccines(
    pet_id: str,
    vaccine_ids: Iterable[str],
    backend: Optional[BackendClient] = None,
) -> int:
    """Link each selected vaccine to a pet; returns the number of links written."""
    backend = backend or get_backend()
    count = 0
    for vaccine_id in vaccine_ids:
        await backend.insert(
            LINK_TABLE,
            {"pet_id": pet_id, "vaccine_id": vaccine_id},
            row_id=f"{pet_id}_{vaccine_id}",
        )
        count += 1
    if count:
        logger.info(f"Linked {count} vaccines to pet {pet_id}")
    return count


async def get_pet_vaccine_names(pet_id: str, backend: Optional[BackendClient] = None) -> List[str]:
    """Names of the vaccines linked to a pet; links to unknown vaccines are dropped."""
    backend = backend or get_backend()
    links = await backend.select(LINK_TABLE, filters={"pet_id": pet_id})
    vaccine_ids = [link["vaccine_id"] for link in links if link.get("vaccine_id")]
    if not vaccine_ids:
        return []

    rows = await backend.select(TABLE, in_filters={"id": vaccine_ids}, fields=["name"])
    names = {row["id"]: row.get("name") for row in rows}
    return [names[vid] for vid in vaccine_ids if names.get(vid)]


async def delete_pet_vaccines(pet_id: str, backend: Optional[BackendClient] = None) -> int:
    backend = backend or get_backend()
    return await backend.delete(LINK_TABLE, {"pet_id": pet_id})
