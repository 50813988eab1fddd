"""
Helper utilities for PawMarket.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Iterable, List, Union

from ..config import settings
from ..schemas.listing import (
    Pet,
    PetCard,
    PetStatus,
    PriceRange,
    Service,
    ServiceCard,
    ServiceStatus,
)
from ..schemas.profile import ProviderSummary


PET_STATUS_LABELS = {
    PetStatus.AVAILABLE: "Available",
    PetStatus.ADOPTED: "Adopted",
    PetStatus.PENDING: "Pending",
}

SERVICE_STATUS_LABELS = {
    ServiceStatus.ACTIVE: "Active",
    ServiceStatus.INACTIVE: "Inactive",
}


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Current UTC time in ISO-8601, the format rows are stamped with."""
    return utc_now().isoformat()


def in_price_range(price: float, price_range: Union[PriceRange, str]) -> bool:
    """
    Check whether a price falls in one of the pets page price buckets.

    Buckets are half-open, so a boundary price belongs to the bucket above it:
    499 is "0-500" and 500 is "500-1000".

    Args:
        price: Listing price
        price_range: Price bucket identifier

    Returns:
        True if the price is inside the bucket
    """
    price_range = PriceRange(price_range)

    if price_range == PriceRange.ALL:
        return True
    if price_range == PriceRange.UNDER_500:
        return price < 500
    if price_range == PriceRange.FROM_500_TO_1000:
        return 500 <= price < 1000
    if price_range == PriceRange.FROM_1000_TO_2000:
        return 1000 <= price < 2000
    if price_range == PriceRange.OVER_2000:
        return price >= 2000
    return True


def filter_by_price_range(pets: Iterable[Pet], price_range: Union[PriceRange, str]) -> List[Pet]:
    """Keep the pets whose price falls in the selected bucket."""
    return [pet for pet in pets if in_price_range(pet.price, price_range)]


def matches_search(query: str, *values: Optional[str]) -> bool:
    """Case-insensitive substring match of the query against any value."""
    needle = query.strip().lower()
    if not needle:
        return True
    return any(value and needle in value.lower() for value in values)


def build_object_name(file_name: str) -> str:
    """
    Build a collision-free storage object name, keeping the file extension.

    Args:
        file_name: Original name of the uploaded file

    Returns:
        Object name of the form ``<uuid4>.<ext>``
    """
    ext = os.path.splitext(file_name)[1].lstrip(".").lower()
    name = str(uuid.uuid4())
    return f"{name}.{ext}" if ext else name


def format_price(value: float) -> str:
    """Format a price for display, e.g. ``$1,250``."""
    if float(value).is_integer():
        return f"${int(value):,}"
    return f"${value:,.2f}"


def format_price_span(price_from: float, price_to: float) -> str:
    """Format a service price span, e.g. ``$50 - $120``."""
    if price_to and price_to != price_from:
        return f"{format_price(price_from)} - {format_price(price_to)}"
    return f"From {format_price(price_from)}"


def format_member_since(dt: Optional[datetime]) -> Optional[str]:
    """Format the member-since date shown on the profile header."""
    if dt is None:
        return None
    return dt.strftime("%d/%m/%Y")


def get_relative_time(dt: datetime, now: Optional[datetime] = None) -> str:
    """Get relative time string (e.g., '2 hours ago')."""
    now = now or utc_now()
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    diff = now - dt

    if diff < timedelta(minutes=1):
        return "just now"
    elif diff < timedelta(hours=1):
        minutes = int(diff.total_seconds() / 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    elif diff < timedelta(days=1):
        hours = int(diff.total_seconds() / 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    elif diff < timedelta(days=30):
        days = diff.days
        return f"{days} day{'s' if days != 1 else ''} ago"
    elif diff < timedelta(days=365):
        months = int(diff.days / 30)
        return f"{months} month{'s' if months != 1 else ''} ago"
    else:
        years = int(diff.days / 365)
        return f"{years} year{'s' if years != 1 else ''} ago"


def format_pet_card(pet: Pet, is_favorite: bool = False) -> PetCard:
    """
    Format a Pet listing into a PetCard for display.

    Args:
        pet: Pet listing
        is_favorite: Whether the current user favorited this pet

    Returns:
        PetCard with display-ready fields
    """
    subtitle = " • ".join(part for part in (pet.breed, pet.age) if part)

    seller_name = "Anonymous"
    seller_rating = None
    if pet.profiles:
        seller_name = pet.profiles.full_name or "Anonymous"
        if pet.profiles.rating > 0:
            seller_rating = round(pet.profiles.rating, 1)

    return PetCard(
        id=pet.id,
        name=pet.name,
        subtitle=subtitle,
        price_label="Donation" if pet.is_donation else format_price(pet.price),
        image_url=pet.image_url or settings.default_pet_image_url,
        location=pet.location,
        description=pet.description,
        seller_name=seller_name,
        seller_rating=seller_rating,
        health_checked=pet.health_checked,
        status_label=PET_STATUS_LABELS[pet.status],
        vaccines=pet.vaccines,
        listed=get_relative_time(pet.created_at) if pet.created_at else None,
        is_favorite=is_favorite,
    )


def format_service_card(
    service: Service,
    providers: Optional[Dict[str, ProviderSummary]] = None,
    is_favorite: bool = False,
) -> ServiceCard:
    """Format a Service listing into a ServiceCard for display."""
    provider = (providers or {}).get(service.provider_id or "")

    return ServiceCard(
        id=service.id,
        title=service.title,
        category=service.category,
        price_label=format_price_span(service.price_from, service.price_to),
        image_url=service.image_url,
        location=service.location,
        description=service.description,
        provider_name=(provider.full_name if provider and provider.full_name else "Anonymous"),
        provider_avatar_url=provider.avatar_url if provider else None,
        status_label=SERVICE_STATUS_LABELS[service.status],
        is_favorite=is_favorite,
    )
