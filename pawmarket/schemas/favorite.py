"""
Favorite records and the aggregated favorites view.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from urllib.parse import quote
from pydantic import BaseModel, Field

from .listing import Pet, Service


class ItemType(str, Enum):
    """Kinds of listings a user can favorite."""
    PET = "pet"
    SERVICE = "service"


class Favorite(BaseModel):
    """A user-to-item bookmark row."""

    user_id: str = Field(..., description="Profile ID of the owner")
    item_id: str = Field(..., description="ID of the favorited pet or service")
    item_type: ItemType = Field(...)
    id: Optional[str] = Field(default=None, description="Backend row ID")
    created_at: Optional[datetime] = Field(default=None)

    @staticmethod
    def row_id(user_id: str, item_id: str, item_type: ItemType) -> str:
        """
        Deterministic row ID; one row per (user, item, type).

        Each part is percent-encoded, so the ":" separator never appears inside
        a part and distinct triples never share an ID.
        """
        parts = (user_id, ItemType(item_type).value, item_id)
        return ":".join(quote(part, safe="") for part in parts)

    def matches(self, user_id: str, item_id: str, item_type: ItemType) -> bool:
        """Whether this row is the favorite of exactly this (user, item, type)."""
        return (
            self.user_id == user_id
            and self.item_id == item_id
            and self.item_type == ItemType(item_type)
        )


class FavoritesOverview(BaseModel):
    """Favorites resolved to the listings they point at."""

    pets: List[Pet] = Field(default_factory=list)
    services: List[Service] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.pets) + len(self.services)
