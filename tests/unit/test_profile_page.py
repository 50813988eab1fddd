"""
Unit tests for the profile page.
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

from pawmarket.config import settings
from pawmarket.errors import AlertError
from pawmarket.queries.favorites import add_to_favorites
from pawmarket.queries.profiles import ensure_profile
from pawmarket.schemas.favorite import ItemType
from pawmarket.schemas.listing import ImageUpload, NewPetListing, NewServiceListing
from pawmarket.schemas.profile import AuthenticatedUser, ProfileUpdate
from pawmarket.utils.backend_client import BackendError, MemoryBackend
from pawmarket.views.profile_page import ProfilePage, ProfileTab


class TestProfilePage:
    """Unit tests for ProfilePage."""

    @pytest.fixture
    def backend(self):
        settings.mock_backend = True
        backend = MemoryBackend()
        backend.seed("vaccines", [
            {"id": "v_rabies", "name": "Rabies"},
            {"id": "v_dhpp", "name": "DHPP"},
            {"id": "v_lepto", "name": "Leptospirosis"},
        ])
        backend.seed("profiles", [
            {"id": "owner_9", "full_name": "Carlos Lima", "email": "carlos@pawmarket.com.br", "phone": "+5511988887777"},
        ])
        return backend

    @pytest.fixture
    def user(self):
        return AuthenticatedUser(
            id="user_1",
            email="ana@example.com",
            full_name="Ana Souza",
            created_at=datetime(2023, 5, 17, tzinfo=timezone.utc),
        )

    @pytest.fixture
    def page(self, user, backend):
        return ProfilePage(user, backend=backend)

    @pytest.fixture
    def pet_listing(self):
        return NewPetListing(name="Thor", category="dogs", breed="Golden Retriever", age="2 years")

    @pytest.mark.asyncio
    async def test_open_creates_profile_and_loads_catalogue(self, page, backend):
        await page.open()

        assert page.profile.full_name == "Ana Souza"
        assert page.profile.email == "ana@example.com"
        assert [v.name for v in page.available_vaccines] == ["DHPP", "Leptospirosis", "Rabies"]
        assert page.user_pets == []
        assert page.favorites.total == 0

    @pytest.mark.asyncio
    async def test_ensure_profile_keeps_edited_name(self, user, backend):
        await backend.insert("profiles", {"full_name": "Ana S.", "bio": "Breeder"}, row_id="user_1")

        profile = await ensure_profile(user, backend=backend)

        assert profile.full_name == "Ana S."
        assert profile.bio == "Breeder"

    @pytest.mark.asyncio
    async def test_ensure_profile_falls_back_to_email(self, backend):
        user = AuthenticatedUser(id="user_2", email="bob@example.com")

        profile = await ensure_profile(user, backend=backend)

        assert profile.full_name == "bob@example.com"

    @pytest.mark.asyncio
    async def test_add_pet_uploads_image_and_links_vaccines(self, page, backend, pet_listing):
        page.toggle_add_pet_form()
        image = ImageUpload(file_name="thor.jpg", content=b"\xff\xd8jpeg", content_type="image/jpeg")

        pet = await page.add_pet(pet_listing, image=image, vaccine_ids=["v_rabies", "v_dhpp"])

        assert pet.seller_id == "user_1"
        assert pet.created_at is not None
        bucket = backend.buckets[settings.storage_bucket_pets]
        object_name = next(iter(bucket))
        assert object_name.endswith(".jpg")
        assert pet.image_url == backend.get_public_url("pets", object_name)

        assert len(page.user_pets) == 1
        assert sorted(page.user_pets[0].vaccines) == ["DHPP", "Rabies"]
        assert page.show_add_pet_form is False
        assert page.adding_pet is False

    @pytest.mark.asyncio
    async def test_add_pet_without_image(self, page, pet_listing):
        pet = await page.add_pet(pet_listing)

        assert pet.image_url == ""
        assert page.render(ProfileTab.PETS.value)["pets"][0]["image_url"] == settings.default_pet_image_url

    @pytest.mark.asyncio
    async def test_add_pet_failure_raises_alert(self, page, pet_listing):
        page.toggle_add_pet_form()

        with patch(
            "pawmarket.views.profile_page.create_pet",
            new=AsyncMock(side_effect=BackendError("insert into pets failed")),
        ):
            with pytest.raises(AlertError) as exc_info:
                await page.add_pet(pet_listing)

        assert exc_info.value.message == "Failed to add pet!"
        assert page.show_add_pet_form is True
        assert page.adding_pet is False

    @pytest.mark.asyncio
    async def test_add_pet_rejects_bad_image(self, page, backend, pet_listing):
        image = ImageUpload(file_name="virus.exe", content=b"MZ")

        with pytest.raises(AlertError):
            await page.add_pet(pet_listing, image=image)

        assert backend.buckets == {}
        assert await backend.select("pets") == []

    @pytest.mark.asyncio
    async def test_add_and_delete_service(self, page, backend):
        listing = NewServiceListing(title="Grooming", category="grooming", price_from=40, price_to=80)

        service = await page.add_service(listing)
        assert [s.id for s in page.user_services] == [service.id]

        assert await page.delete_service(service.id) is True
        assert page.user_services == []

    @pytest.mark.asyncio
    async def test_delete_pet_removes_vaccine_links(self, page, backend, pet_listing):
        pet = await page.add_pet(pet_listing, vaccine_ids=["v_rabies"])

        assert await page.delete_pet(pet.id) is True

        assert page.user_pets == []
        assert await backend.select("pet_vaccines") == []

    @pytest.mark.asyncio
    async def test_delete_failure_is_logged_not_raised(self, page):
        with patch(
            "pawmarket.views.profile_page.delete_pet",
            new=AsyncMock(side_effect=BackendError("delete failed")),
        ):
            assert await page.delete_pet("pet_x") is False

    @pytest.mark.asyncio
    async def test_update_profile_leaves_edit_mode(self, page):
        await page.open()
        page.start_editing()

        saved = await page.update_profile(
            ProfileUpdate(full_name="Ana Souza", location="Sao Paulo, SP", bio="Dog lover")
        )

        assert saved
        assert page.is_editing is False
        assert page.profile.bio == "Dog lover"
        assert page.profile.updated_at is not None
        assert page.profile.email == "ana@example.com"

    @pytest.mark.asyncio
    async def test_favorites_tab_skips_deleted_listings(self, page, backend, pet_listing):
        pet = await page.add_pet(pet_listing)
        await add_to_favorites("user_1", pet.id, ItemType.PET, backend=backend)
        await add_to_favorites("user_1", "deleted_pet", ItemType.PET, backend=backend)

        await page.fetch_favorites()
        rendered = page.render("favorites")

        assert [card["id"] for card in rendered["favorites"]["pets"]] == [pet.id]
        assert rendered["favorites"]["pets"][0]["is_favorite"]
        assert rendered["header"]["stats"]["favorites"] == 1

    @pytest.mark.asyncio
    async def test_favorites_failure_shows_empty_tab(self, page):
        with patch(
            "pawmarket.views.profile_page.load_favorites_overview",
            new=AsyncMock(side_effect=BackendError("unavailable")),
        ):
            overview = await page.fetch_favorites()

        assert overview.total == 0

    @pytest.mark.asyncio
    async def test_show_contact(self, page):
        contact = await page.show_contact("owner_9")

        assert contact.full_name == "Carlos Lima"
        assert contact.email == "carlos@pawmarket.com.br"
        assert await page.show_contact("nobody") is None

    @pytest.mark.asyncio
    async def test_overview_limits_previews(self, page):
        for i in range(5):
            await page.add_pet(NewPetListing(name=f"Pet {i}", category="cats"))

        rendered = page.render()

        assert rendered["active_tab"] == "overview"
        assert len(rendered["overview"]["pets"]) == settings.overview_preview_limit
        assert rendered["header"]["stats"]["pets"] == 5
        assert rendered["header"]["member_since"] == "17/05/2023"
        assert rendered["overview"]["complete_profile_prompt"] is True

    def test_invalid_tab(self, page):
        with pytest.raises(ValueError):
            page.set_tab("billing")

    @pytest.mark.asyncio
    async def test_upload_avatar_keeps_other_fields(self, page, backend):
        await page.open()
        await page.update_profile(ProfileUpdate(full_name="Ana Souza", bio="Dog lover"))

        profile = await page.upload_avatar(
            ImageUpload(file_name="me.webp", content=b"RIFF", content_type="image/webp")
        )

        object_name = next(iter(backend.buckets[settings.storage_bucket_avatars]))
        assert profile.avatar_url == backend.get_public_url("avatars", object_name)
        assert profile.bio == "Dog lover"
        assert page.render()["header"]["avatar_url"] == profile.avatar_url

    @pytest.mark.asyncio
    async def test_partial_update_keeps_stored_fields(self, page, backend):
        await page.open()
        await page.update_profile(ProfileUpdate(phone="+5511912345678", user_type="seller"))

        await page.update_profile(ProfileUpdate(location="Recife, PE"))

        stored = await backend.get("profiles", "user_1")
        assert stored["location"] == "Recife, PE"
        assert stored["phone"] == "+5511912345678"
        assert stored["user_type"] == "seller"
        assert stored["full_name"] == "Ana Souza"

    @pytest.mark.asyncio
    async def test_uploads_use_logical_bucket_names(self, page, pet_listing):
        image = ImageUpload(file_name="thor.png", content=b"\x89PNG", content_type="image/png")
        upload = AsyncMock(return_value="https://storage.example.com/thor.png")

        with patch("pawmarket.views.profile_page.upload_listing_image", new=upload):
            await page.add_pet(pet_listing, image=image)
            await page.add_service(NewServiceListing(title="Grooming", category="grooming"), image=image)
            await page.upload_avatar(image)

        assert [c.args[0] for c in upload.call_args_list] == ["pets", "services", "avatars"]
