"""
Pet and service listing models and schemas.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, ValidationInfo


class PetCategory(str, Enum):
    """Pet listing categories."""
    DOGS = "dogs"
    CATS = "cats"
    BIRDS = "birds"
    FISH = "fish"
    RABBITS = "rabbits"
    HAMSTERS = "hamsters"
    OTHER = "other"


class PetStatus(str, Enum):
    """Pet availability status."""
    AVAILABLE = "available"
    ADOPTED = "adopted"
    PENDING = "pending"


class ServiceStatus(str, Enum):
    """Service listing status."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class PriceRange(str, Enum):
    """Price buckets offered by the pets page filter."""
    ALL = "all"
    UNDER_500 = "0-500"
    FROM_500_TO_1000 = "500-1000"
    FROM_1000_TO_2000 = "1000-2000"
    OVER_2000 = "2000+"


class SellerSummary(BaseModel):
    """Public seller details joined onto a pet listing."""

    id: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    rating: float = Field(default=0, ge=0, le=5)


class Pet(BaseModel):
    """Pet listing as stored in the pets table."""

    # Identifiers
    id: str = Field(..., description="Listing identifier")
    seller_id: Optional[str] = Field(default=None, description="Profile ID of the seller")

    # Basic information
    name: str = Field(..., description="Pet name")
    breed: Optional[str] = Field(default=None)
    age: Optional[str] = Field(default=None, description="Free-text age, e.g. '2 years'")
    category: Optional[PetCategory] = Field(default=None)
    description: Optional[str] = Field(default=None)
    location: Optional[str] = Field(default=None)

    # Commercial terms
    price: float = Field(default=0, ge=0)
    is_donation: bool = Field(default=False)

    # Media
    image_url: Optional[str] = Field(default=None)

    # Health
    health_checked: bool = Field(default=False)
    vaccines: List[str] = Field(
        default_factory=list,
        description="Names of vaccines given"
    )

    # Availability
    status: PetStatus = Field(default=PetStatus.AVAILABLE)

    # Joined seller profile
    profiles: Optional[SellerSummary] = Field(default=None)

    # Metadata
    created_at: Optional[datetime] = Field(default=None)

    class Config:
        json_schema_extra = {
            "example": {
                "id": "pet_12345",
                "seller_id": "user_001",
                "name": "Thor",
                "breed": "Golden Retriever",
                "age": "2 years",
                "category": "dogs",
                "price": 750,
                "location": "Sao Paulo, SP",
                "status": "available"
            }
        }


class Service(BaseModel):
    """Service listing as stored in the services table."""

    id: str = Field(..., description="Listing identifier")
    provider_id: Optional[str] = Field(default=None, description="Profile ID of the provider")

    title: str = Field(..., description="Service title")
    description: Optional[str] = Field(default=None)
    category: Optional[str] = Field(default=None, description="Service category, e.g. grooming")
    location: Optional[str] = Field(default=None)

    price_from: float = Field(default=0, ge=0)
    price_to: float = Field(default=0, ge=0)

    image_url: Optional[str] = Field(default=None)
    status: ServiceStatus = Field(default=ServiceStatus.ACTIVE)

    created_at: Optional[datetime] = Field(default=None)


class NewPetListing(BaseModel):
    """Form fields for creating a pet listing."""

    name: str = Field(..., min_length=1, max_length=100)
    breed: str = Field(default="", max_length=100)
    age: str = Field(default="", max_length=50)
    description: str = Field(default="", max_length=5000)
    category: PetCategory = Field(...)
    location: str = Field(default="", max_length=100)
    status: PetStatus = Field(default=PetStatus.AVAILABLE)
    is_donation: bool = Field(default=True)
    price: float = Field(default=0, ge=0)

    @field_validator("price")
    @classmethod
    def validate_donation_price(cls, v, info: ValidationInfo):
        """Donations are listed for free."""
        if info.data.get("is_donation") and v:
            raise ValueError("price must be 0 for a donation")
        return v


class NewServiceListing(BaseModel):
    """Form fields for creating a service listing."""

    title: str = Field(..., min_length=1, max_length=150)
    description: str = Field(default="", max_length=5000)
    category: str = Field(..., min_length=1, max_length=50)
    location: str = Field(default="", max_length=100)
    price_from: float = Field(default=0, ge=0)
    price_to: float = Field(default=0, ge=0)
    status: ServiceStatus = Field(default=ServiceStatus.ACTIVE)

    @field_validator("price_to")
    @classmethod
    def validate_price_bounds(cls, v, info: ValidationInfo):
        """Upper price bound cannot be below the lower bound."""
        price_from = info.data.get("price_from")
        if price_from is not None and v < price_from:
            raise ValueError("price_to must be greater than or equal to price_from")
        return v


class PetCard(BaseModel):
    """Pet listing formatted for display on the pets grid."""

    id: str
    name: str
    subtitle: str
    price_label: str
    image_url: str
    location: Optional[str] = None
    description: Optional[str] = None
    seller_name: str
    seller_rating: Optional[float] = None
    health_checked: bool = False
    status_label: str
    vaccines: List[str] = Field(default_factory=list)
    listed: Optional[str] = None
    is_favorite: bool = False


class ServiceCard(BaseModel):
    """Service listing formatted for display on the services grid."""

    id: str
    title: str
    category: Optional[str] = None
    price_label: str
    image_url: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    provider_name: str
    provider_avatar_url: Optional[str] = None
    status_label: str
    is_favorite: bool = False


class Vaccine(BaseModel):
    """Entry of the vaccine catalogue."""

    id: str
    name: str


class ImageUpload(BaseModel):
    """Image file attached to a listing form."""

    file_name: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)
