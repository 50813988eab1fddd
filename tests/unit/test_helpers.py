"""
Unit tests for helper and validation utilities.
"""

import pytest
from datetime import datetime, timedelta, timezone

from pawmarket.config import settings
from pawmarket.schemas.listing import Pet, PriceRange, SellerSummary, Service
from pawmarket.schemas.profile import ProviderSummary
from pawmarket.utils.helpers import (
    build_object_name,
    filter_by_price_range,
    format_pet_card,
    format_price,
    format_price_span,
    format_service_card,
    get_relative_time,
    in_price_range,
    matches_search,
)
from pawmarket.utils.validators import (
    validate_image_file,
    validate_pet_listing,
    validate_profile_update,
    validate_service_listing,
)


class TestPriceRanges:
    """Tests for the pets page price buckets."""

    @pytest.mark.parametrize("price,price_range,expected", [
        (499, PriceRange.UNDER_500, True),
        (499, PriceRange.FROM_500_TO_1000, False),
        (500, PriceRange.UNDER_500, False),
        (500, PriceRange.FROM_500_TO_1000, True),
        (999.99, PriceRange.FROM_500_TO_1000, True),
        (1000, PriceRange.FROM_1000_TO_2000, True),
        (2000, PriceRange.FROM_1000_TO_2000, False),
        (2000, PriceRange.OVER_2000, True),
        (0, PriceRange.ALL, True),
    ])
    def test_boundaries(self, price, price_range, expected):
        assert in_price_range(price, price_range) is expected

    def test_accepts_string_identifiers(self):
        assert in_price_range(750, "500-1000")

    def test_invalid_range_rejected(self):
        with pytest.raises(ValueError):
            in_price_range(100, "cheap")

    def test_filter_partitions_pets(self):
        pets = [
            Pet(id=str(price), name=f"Pet {price}", price=price)
            for price in (0, 499, 500, 1500, 2500)
        ]

        under = filter_by_price_range(pets, PriceRange.UNDER_500)
        middle = filter_by_price_range(pets, PriceRange.FROM_500_TO_1000)

        assert [pet.price for pet in under] == [0, 499]
        assert [pet.price for pet in middle] == [500]
        assert len(filter_by_price_range(pets, PriceRange.ALL)) == 5


class TestFormatting:
    """Tests for display helpers."""

    def test_format_price(self):
        assert format_price(1250) == "$1,250"
        assert format_price(19.5) == "$19.50"

    def test_format_price_span(self):
        assert format_price_span(50, 120) == "$50 - $120"
        assert format_price_span(80, 0) == "From $80"

    def test_matches_search_is_case_insensitive(self):
        assert matches_search("golden", "Thor", "Golden Retriever")
        assert not matches_search("poodle", "Thor", None)
        assert matches_search("  ", "anything")

    def test_relative_time(self):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert get_relative_time(now - timedelta(seconds=10), now=now) == "just now"
        assert get_relative_time(now - timedelta(hours=2), now=now) == "2 hours ago"
        assert get_relative_time(now - timedelta(days=1), now=now) == "1 day ago"

    def test_build_object_name_keeps_extension(self):
        name = build_object_name("Photo.JPG")
        assert name.endswith(".jpg")
        assert len(name) == 36 + 4
        assert build_object_name("photo.jpg") != build_object_name("photo.jpg")

    def test_pet_card_for_donation_without_image(self):
        pet = Pet(id="pet_1", name="Thor", breed="Golden Retriever", age="2 years", is_donation=True)

        card = format_pet_card(pet, is_favorite=True)

        assert card.price_label == "Donation"
        assert card.image_url == settings.default_pet_image_url
        assert card.seller_name == "Anonymous"
        assert card.subtitle == "Golden Retriever • 2 years"
        assert card.is_favorite

    def test_pet_card_with_seller(self):
        pet = Pet(
            id="pet_2",
            name="Mia",
            price=350,
            profiles=SellerSummary(id="u1", full_name="Ana Souza", rating=4.66),
        )

        card = format_pet_card(pet)

        assert card.price_label == "$350"
        assert card.seller_name == "Ana Souza"
        assert card.seller_rating == 4.7

    def test_service_card_uses_provider(self):
        service = Service(id="svc_1", title="Grooming", provider_id="u1", price_from=40, price_to=90)
        providers = {"u1": ProviderSummary(id="u1", full_name="Pet Spa", avatar_url="https://x/a.png")}

        card = format_service_card(service, providers=providers)

        assert card.provider_name == "Pet Spa"
        assert card.provider_avatar_url == "https://x/a.png"
        assert card.status_label == "Active"


class TestValidators:
    """Tests for form validators."""

    def test_valid_pet_listing(self):
        is_valid, error, listing = validate_pet_listing({
            "name": "  Thor  ",
            "category": "dogs",
            "is_donation": False,
            "price": 750,
        })

        assert is_valid
        assert error is None
        assert listing.name == "Thor"

    def test_donation_must_be_free(self):
        is_valid, error, listing = validate_pet_listing({
            "name": "Thor",
            "category": "dogs",
            "is_donation": True,
            "price": 100,
        })

        assert not is_valid
        assert "donation" in error
        assert listing is None

    def test_unknown_pet_category(self):
        is_valid, _, _ = validate_pet_listing({"name": "Nemo", "category": "sharks"})
        assert not is_valid

    def test_service_price_bounds(self):
        is_valid, error, _ = validate_service_listing({
            "title": "Walks",
            "category": "walking",
            "price_from": 50,
            "price_to": 20,
        })

        assert not is_valid
        assert "price_to" in error

    def test_profile_phone(self):
        assert validate_profile_update({"phone": "+55 11 99999-0000"})[0]
        is_valid, error, _ = validate_profile_update({"phone": "123"})
        assert not is_valid
        assert error == "Invalid phone number format"

    @pytest.mark.parametrize("file_name,size,expected", [
        ("photo.png", 1024, True),
        ("photo.PNG", 1024, True),
        ("photo.exe", 1024, False),
        ("../photo.png", 1024, False),
        ("photo.png", 0, False),
        ("", 1024, False),
    ])
    def test_image_file(self, file_name, size, expected):
        assert validate_image_file(file_name, size)[0] is expected

    def test_image_too_large(self):
        is_valid, error = validate_image_file("photo.jpg", settings.max_image_size_bytes + 1)
        assert not is_valid
        assert "exceeds" in error
