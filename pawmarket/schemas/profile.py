"""
User profile data models.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, EmailStr


class UserType(str, Enum):
    """Marketplace roles a profile can take."""
    CONSUMER = "consumer"
    VETERINARIAN = "veterinarian"
    SELLER = "seller"


class AuthenticatedUser(BaseModel):
    """Identity handed over by the upstream identity provider."""

    id: str = Field(..., min_length=1, description="Unique user identifier")
    email: Optional[str] = Field(default=None)
    full_name: Optional[str] = Field(default=None, description="Name from the identity metadata")
    created_at: Optional[datetime] = Field(default=None)

    def display_name(self) -> str:
        """Name used when a profile row is first created."""
        return self.full_name or self.email or ""


class Profile(BaseModel):
    """Profile row as stored in the profiles table."""

    id: str = Field(..., description="Same identifier as the authenticated user")
    full_name: str = Field(default="")
    email: Optional[str] = Field(default=None)
    phone: str = Field(default="")
    location: str = Field(default="", description="City, State")
    bio: str = Field(default="")
    avatar_url: str = Field(default="")
    user_type: UserType = Field(default=UserType.CONSUMER)
    rating: float = Field(default=0, ge=0, le=5)

    # Metadata
    created_at: Optional[datetime] = Field(default=None)
    updated_at: Optional[datetime] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "user_12345",
                "full_name": "Ana Souza",
                "phone": "+55 11 99999-0000",
                "location": "Sao Paulo, SP",
                "bio": "Golden retriever breeder for ten years.",
                "user_type": "seller"
            }
        }


class ProfileUpdate(BaseModel):
    """Editable fields from the settings tab."""

    full_name: str = Field(default="", max_length=100)
    phone: str = Field(default="", max_length=30)
    location: str = Field(default="", max_length=100)
    bio: str = Field(default="", max_length=1000)
    avatar_url: str = Field(default="")
    user_type: UserType = Field(default=UserType.CONSUMER)


class ContactInfo(BaseModel):
    """Details shown on a listing owner's contact card."""

    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class ProviderSummary(BaseModel):
    """Public provider details shown next to service listings."""

    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
