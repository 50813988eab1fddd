"""
Unit tests for the pets and services pages.
"""

import pytest
from unittest.mock import AsyncMock, patch

from pawmarket.config import settings
from pawmarket.errors import AuthenticationRequired
from pawmarket.queries.favorites import add_to_favorites
from pawmarket.schemas.favorite import ItemType
from pawmarket.schemas.listing import PriceRange
from pawmarket.utils.backend_client import BackendError, MemoryBackend
from pawmarket.views.pets_page import PetsPage
from pawmarket.views.services_page import ServicesPage


@pytest.fixture
def backend():
    settings.mock_backend = True
    backend = MemoryBackend()
    backend.seed("profiles", [
        {"id": "seller_1", "full_name": "Ana Souza", "avatar_url": "https://img/ana.png", "rating": 4.8},
        {"id": "provider_1", "full_name": "Happy Paws", "avatar_url": None},
    ])
    backend.seed("pets", [
        {"id": "pet_1", "seller_id": "seller_1", "name": "Thor", "breed": "Golden Retriever",
         "category": "dogs", "price": 499, "created_at": "2024-01-01T10:00:00+00:00"},
        {"id": "pet_2", "seller_id": "seller_1", "name": "Luna", "breed": "Siamese",
         "category": "cats", "price": 500, "created_at": "2024-01-02T10:00:00+00:00"},
        {"id": "pet_3", "seller_id": "ghost", "name": "Bolt", "breed": "Border Collie",
         "category": "dogs", "price": 1500, "created_at": "2024-01-03T10:00:00+00:00"},
    ])
    backend.seed("services", [
        {"id": "svc_1", "provider_id": "provider_1", "title": "Dog Walking", "category": "walking",
         "description": "Daily walks", "price_from": 20, "created_at": "2024-01-01T10:00:00+00:00"},
        {"id": "svc_2", "provider_id": "provider_1", "title": "Full Grooming", "category": "grooming",
         "description": "Bath and trim", "price_from": 60, "price_to": 90,
         "created_at": "2024-01-02T10:00:00+00:00"},
    ])
    return backend


class TestPetsPage:
    """Unit tests for PetsPage."""

    @pytest.mark.asyncio
    async def test_refresh_loads_newest_first_with_sellers(self, backend):
        page = PetsPage("buyer_1", backend=backend)

        await page.refresh()

        assert [pet.id for pet in page.pets] == ["pet_3", "pet_2", "pet_1"]
        assert page.pets[1].profiles.full_name == "Ana Souza"
        assert page.pets[0].profiles is None
        assert page.error is None

    @pytest.mark.asyncio
    async def test_category_and_search_filters_reload(self, backend):
        page = PetsPage(backend=backend)

        assert await page.set_filters(category="dogs") is True
        assert [pet.name for pet in page.pets] == ["Bolt", "Thor"]

        assert await page.set_filters(search="golden") is True
        assert [pet.name for pet in page.pets] == ["Thor"]

        assert await page.set_filters(category="dogs") is False

    @pytest.mark.asyncio
    async def test_price_range_filters_locally(self, backend):
        page = PetsPage(backend=backend)
        await page.refresh()

        with patch("pawmarket.views.pets_page.get_pets", new=AsyncMock()) as mock_get:
            reloaded = await page.set_filters(price_range="0-500")
            mock_get.assert_not_called()

        assert reloaded is False
        assert page.price_range == PriceRange.UNDER_500
        assert [pet.id for pet in page.filtered_pets] == ["pet_1"]

        await page.set_filters(price_range="500-1000")
        rendered = page.render()
        assert [card["id"] for card in rendered["pets"]] == ["pet_2"]
        assert rendered["summary"] == "Showing 1 of 3 pets"

    @pytest.mark.asyncio
    async def test_backend_failure_sets_inline_error(self, backend):
        page = PetsPage(backend=backend)

        with patch(
            "pawmarket.views.pets_page.get_pets",
            new=AsyncMock(side_effect=BackendError("select from pets failed")),
        ):
            await page.fetch_pets()

        assert page.error == "select from pets failed"
        assert page.loading is False
        assert page.render()["error"] == "select from pets failed"

    @pytest.mark.asyncio
    async def test_toggle_marks_card_as_favorite(self, backend):
        page = PetsPage("buyer_1", backend=backend)
        await page.refresh()

        assert await page.toggle_favorite("pet_2") is True
        cards = {card["id"]: card for card in page.render()["pets"]}
        assert cards["pet_2"]["is_favorite"]
        assert not cards["pet_1"]["is_favorite"]

        assert await page.toggle_favorite("pet_2") is False
        assert not page.favorites.is_favorite("pet_2")

    @pytest.mark.asyncio
    async def test_anonymous_toggle_requires_sign_in(self, backend):
        page = PetsPage(backend=backend)

        with pytest.raises(AuthenticationRequired):
            await page.toggle_favorite("pet_1")

    @pytest.mark.asyncio
    async def test_empty_result_message(self, backend):
        page = PetsPage(backend=backend)
        await page.set_filters(category="birds")

        rendered = page.render()
        assert rendered["pets"] == []
        assert rendered["empty_message"].startswith("No pets found")


class TestServicesPage:
    """Unit tests for ServicesPage."""

    @pytest.mark.asyncio
    async def test_refresh_loads_services_and_providers(self, backend):
        await add_to_favorites("buyer_1", "svc_1", ItemType.SERVICE, backend=backend)
        page = ServicesPage("buyer_1", backend=backend)

        await page.refresh()

        assert [service.id for service in page.services] == ["svc_2", "svc_1"]
        assert set(page.providers) == {"provider_1"}
        cards = {card["id"]: card for card in page.render()["services"]}
        assert cards["svc_1"]["provider_name"] == "Happy Paws"
        assert cards["svc_1"]["is_favorite"]
        assert cards["svc_2"]["price_label"] == "$60 - $90"

    @pytest.mark.asyncio
    async def test_category_filter(self, backend):
        page = ServicesPage(backend=backend)

        await page.set_filters(category="grooming")

        assert [service.title for service in page.services] == ["Full Grooming"]

    @pytest.mark.asyncio
    async def test_search_matches_description(self, backend):
        page = ServicesPage(backend=backend)

        await page.set_filters(search="daily")

        assert [service.id for service in page.services] == ["svc_1"]

    @pytest.mark.asyncio
    async def test_no_services_skips_provider_lookup(self, backend):
        page = ServicesPage(backend=backend)
        page.services = []

        with patch.object(backend, "select", new=AsyncMock()) as mock_select:
            providers = await page.fetch_providers()

        assert providers == {}
        mock_select.assert_not_called()

    @pytest.mark.asyncio
    async def test_toggle_failure_sets_error(self, backend):
        page = ServicesPage("buyer_1", backend=backend)

        with patch(
            "pawmarket.views.favorites.add_to_favorites",
            new=AsyncMock(side_effect=BackendError("insert into favorites failed")),
        ):
            result = await page.toggle_favorite("svc_1")

        assert result is None
        assert page.error == "insert into favorites failed"
        assert not page.favorites.is_favorite("svc_1")
