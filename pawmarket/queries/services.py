"""
Service listing queries.
"""

from typing import Any, Dict, Iterable, List, Optional
from loguru import logger
from pydantic import ValidationError

from ..schemas.listing import NewServiceListing, Service
from ..schemas.profile import ProviderSummary
from ..utils.backend_client import BackendClient, get_backend
from ..utils.helpers import matches_search, utc_now_iso

TABLE = "services"


def parse_services(rows: List[Dict[str, Any]]) -> List[Service]:
    """Build Service objects from rows, skipping rows that do not fit the schema."""
    services = []
    for row in rows:
        try:
            services.append(Service(**row))
        except ValidationError as e:
            logger.warning(f"Skipping malformed service row {row.get('id')}: {e}")
    return services


async def get_services(
    filters: Optional[Dict[str, Any]] = None,
    backend: Optional[BackendClient] = None,
) -> List[Service]:
    """
    Fetch service listings for the marketplace grid, newest first.

    Args:
        filters: Optional ``service`` (category) and ``search`` (title or
            description) filters
        backend: Backend to query (defaults to the shared backend)

    Returns:
        List of Service objects
    """
    backend = backend or get_backend()
    filters = filters or {}

    equality = {}
    if filters.get("service"):
        equality["category"] = filters["service"]

    rows = await backend.select(
        TABLE, filters=equality, order_by="created_at", descending=True
    )
    services = parse_services(rows)

    search = (filters.get("search") or "").strip()
    if search:
        services = [
            service for service in services
            if matches_search(search, service.title, service.description)
        ]

    logger.info(f"Fetched {len(services)} services (filters={filters})")
    return services


async def get_service(service_id: str, backend: Optional[BackendClient] = None) -> Optional[Service]:
    """Fetch a single service listing, or None if it does not exist."""
    backend = backend or get_backend()
    row = await backend.get(TABLE, service_id)
    if row is None:
        return None
    return Service(**row)


async def get_user_services(provider_id: str, backend: Optional[BackendClient] = None) -> List[Service]:
    """Fetch the listings of one provider, newest first."""
    backend = backend or get_backend()
    rows = await backend.select(
        TABLE, filters={"provider_id": provider_id}, order_by="created_at", descending=True
    )
    return parse_services(rows)


async def create_service(
    provider_id: str,
    listing: NewServiceListing,
    image_url: str = "",
    backend: Optional[BackendClient] = None,
) -> Service:
    """Insert a new service listing owned by the provider."""
    backend = backend or get_backend()
    data = {
        **listing.model_dump(mode="json"),
        "provider_id": provider_id,
        "created_at": utc_now_iso(),
        "image_url": image_url,
    }
    row = await backend.insert(TABLE, data)
    logger.info(f"Created service listing {row['id']} for provider {provider_id}")
    return Service(**row)


async def delete_service(service_id: str, backend: Optional[BackendClient] = None) -> bool:
    backend = backend or get_backend()
    deleted = await backend.delete(TABLE, {"id": service_id})
    logger.info(
        f"Deleted service listing {service_id}" if deleted else f"Service listing {service_id} not found"
    )
    return bool(deleted)


async def get_provider_profiles(
    provider_ids: Iterable[str],
    backend: Optional[BackendClient] = None,
) -> Dict[str, ProviderSummary]:
    """
    Fetch public profiles for a set of providers in one query.

    Args:
        provider_ids: Provider profile IDs (duplicates are ignored)
        backend: Backend to query (defaults to the shared backend)

    Returns:
        Mapping of provider ID to ProviderSummary; empty when no IDs are given
    """
    ids = sorted({pid for pid in provider_ids if pid})
    if not ids:
        return {}

    backend = backend or get_backend()
    rows = await backend.select(
        "profiles", in_filters={"id": ids}, fields=["full_name", "avatar_url"]
    )
    return {row["id"]: ProviderSummary(**row) for row in rows}
