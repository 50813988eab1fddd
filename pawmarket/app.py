"""
PawMarket HTTP API.
Serves the pets, services and profile pages to the web client.
"""

import sys
from typing import Any, Dict, List, Optional
from fastapi import Depends, FastAPI, File, Form, Header, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger

from .config import settings
from .errors import AlertError, AuthenticationRequired
from .marketplace import Marketplace
from .queries.pets import get_pet
from .queries.services import get_service
from .queries.vaccines import list_vaccines
from .schemas.listing import ImageUpload, PriceRange
from .schemas.profile import AuthenticatedUser
from .utils.backend_client import BackendError
from .utils.validators import validate_pet_listing, validate_profile_update, validate_service_listing
from .views.profile_page import ProfileTab

# Configure logging
logger.remove()  # Remove default handler
logger.add(sys.stderr, level=settings.log_level)

app = FastAPI(
    title="PawMarket API",
    description="Marketplace for pets and pet services",
    version="1.0.0"
)

_marketplace: Optional[Marketplace] = None


def get_marketplace() -> Marketplace:
    """Get or create the shared marketplace."""
    global _marketplace
    if _marketplace is None:
        _marketplace = Marketplace()
    return _marketplace


def reset_marketplace() -> None:
    """Drop all page state (useful for testing)."""
    global _marketplace
    _marketplace = None


def optional_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
) -> Optional[AuthenticatedUser]:
    """Identity forwarded by the upstream identity provider, if any."""
    if not x_user_id:
        return None
    return AuthenticatedUser(id=x_user_id, email=x_user_email, full_name=x_user_name)


def required_user(user: Optional[AuthenticatedUser] = Depends(optional_user)) -> AuthenticatedUser:
    if user is None:
        raise AuthenticationRequired("your profile")
    return user


@app.exception_handler(AlertError)
async def alert_error_handler(request: Request, exc: AlertError):
    return JSONResponse(status_code=400, content={"alert": exc.message})


@app.exception_handler(AuthenticationRequired)
async def authentication_required_handler(request: Request, exc: AuthenticationRequired):
    return JSONResponse(status_code=401, content={"detail": str(exc)})


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    logger.error(f"Unhandled backend error on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.on_event("startup")
async def startup_event():
    """Log startup event."""
    logger.info("PawMarket API is starting up...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Testing mode: {settings.testing_mode}")
    logger.info(f"Mock backend: {settings.mock_backend}")
    logger.info(f"GCP Project: {settings.gcp_project_id}")
    logger.info("Startup complete - ready to accept requests")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    logger.debug("Health check called")
    return {"status": "healthy", "service": "pawmarket"}


@app.get("/pets")
async def pets_page(
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    price_range: Optional[PriceRange] = Query(default=None),
    user: Optional[AuthenticatedUser] = Depends(optional_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.pets_page(user.id if user else None)
    reloaded = await page.set_filters(
        category=category,
        search=search,
        price_range=price_range.value if price_range else None,
    )
    if not reloaded:
        await page.refresh()
    return page.render()


@app.post("/pets/{pet_id}/favorite")
async def toggle_pet_favorite(
    pet_id: str,
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.pets_page(user.id)
    if not page.favorites.loaded:
        await page.fetch_favorites()

    is_favorite = await page.toggle_favorite(pet_id)
    return {"item_id": pet_id, "is_favorite": is_favorite, "error": page.error}


@app.get("/services")
async def services_page(
    category: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    user: Optional[AuthenticatedUser] = Depends(optional_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.services_page(user.id if user else None)
    if not await page.set_filters(category=category, search=search):
        await page.refresh()
    return page.render()


@app.post("/services/{service_id}/favorite")
async def toggle_service_favorite(
    service_id: str,
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.services_page(user.id)
    if not page.favorites.loaded:
        await page.favorites.load()

    is_favorite = await page.toggle_favorite(service_id)
    return {"item_id": service_id, "is_favorite": is_favorite, "error": page.error}


@app.get("/profile")
async def profile_overview(
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.profile_page(user)
    await page.open()
    return page.render(ProfileTab.OVERVIEW.value)


@app.get("/profile/{tab}")
async def profile_tab(
    tab: ProfileTab,
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.profile_page(user)
    await page.open()
    return page.render(tab.value)


@app.put("/profile")
async def update_profile(
    data: Dict[str, Any],
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    is_valid, error_msg, update = validate_profile_update(data)
    if not is_valid:
        raise HTTPException(status_code=422, detail=error_msg)

    page = marketplace.profile_page(user)
    page.start_editing()
    saved = await page.update_profile(update)
    return {
        "saved": saved,
        "profile": page.profile.model_dump(mode="json"),
        "error": page.error,
    }


async def _read_image(image: Optional[UploadFile]) -> Optional[ImageUpload]:
    if image is None or not image.filename:
        return None
    content = await image.read()
    return ImageUpload(file_name=image.filename, content=content, content_type=image.content_type)


@app.post("/profile/avatar")
async def upload_avatar(
    image: UploadFile = File(...),
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    upload = await _read_image(image)
    if upload is None:
        raise HTTPException(status_code=422, detail="Image must have a file name")

    page = marketplace.profile_page(user)
    await page.fetch_user_profile()
    profile = await page.upload_avatar(upload)
    return profile.model_dump(mode="json")


@app.post("/profile/pets", status_code=201)
async def add_pet(
    name: str = Form(...),
    category: str = Form(...),
    breed: str = Form(default=""),
    age: str = Form(default=""),
    description: str = Form(default=""),
    location: str = Form(default=""),
    status: str = Form(default="available"),
    is_donation: bool = Form(default=True),
    price: float = Form(default=0),
    vaccine_ids: List[str] = Form(default=[]),
    image: Optional[UploadFile] = File(default=None),
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    is_valid, error_msg, listing = validate_pet_listing({
        "name": name,
        "category": category,
        "breed": breed,
        "age": age,
        "description": description,
        "location": location,
        "status": status,
        "is_donation": is_donation,
        "price": price,
    })
    if not is_valid:
        raise HTTPException(status_code=422, detail=error_msg)

    page = marketplace.profile_page(user)
    pet = await page.add_pet(listing, image=await _read_image(image), vaccine_ids=vaccine_ids)
    return pet.model_dump(mode="json")


@app.post("/profile/services", status_code=201)
async def add_service(
    title: str = Form(...),
    category: str = Form(...),
    description: str = Form(default=""),
    location: str = Form(default=""),
    price_from: float = Form(default=0),
    price_to: float = Form(default=0),
    status: str = Form(default="active"),
    image: Optional[UploadFile] = File(default=None),
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    is_valid, error_msg, listing = validate_service_listing({
        "title": title,
        "category": category,
        "description": description,
        "location": location,
        "price_from": price_from,
        "price_to": price_to,
        "status": status,
    })
    if not is_valid:
        raise HTTPException(status_code=422, detail=error_msg)

    page = marketplace.profile_page(user)
    service = await page.add_service(listing, image=await _read_image(image))
    return service.model_dump(mode="json")


@app.delete("/profile/pets/{pet_id}")
async def delete_pet(
    pet_id: str,
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.profile_page(user)
    pet = await get_pet(pet_id, backend=page.backend)
    if pet is None:
        raise HTTPException(status_code=404, detail=f"Pet {pet_id} not found")
    if pet.seller_id != user.id:
        raise HTTPException(status_code=403, detail="Only the seller can delete this listing")

    deleted = await page.delete_pet(pet_id)
    return {"deleted": deleted, "pets": len(page.user_pets)}


@app.delete("/profile/services/{service_id}")
async def delete_service(
    service_id: str,
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.profile_page(user)
    service = await get_service(service_id, backend=page.backend)
    if service is None:
        raise HTTPException(status_code=404, detail=f"Service {service_id} not found")
    if service.provider_id != user.id:
        raise HTTPException(status_code=403, detail="Only the provider can delete this listing")

    deleted = await page.delete_service(service_id)
    return {"deleted": deleted, "services": len(page.user_services)}


@app.get("/profiles/{owner_id}/contact")
async def contact_card(
    owner_id: str,
    user: AuthenticatedUser = Depends(required_user),
    marketplace: Marketplace = Depends(get_marketplace),
):
    page = marketplace.profile_page(user)
    contact = await page.show_contact(owner_id)
    if contact is None:
        raise HTTPException(status_code=404, detail=f"No contact details for {owner_id}")
    return contact.model_dump(mode="json")


@app.get("/vaccines")
async def vaccines(marketplace: Marketplace = Depends(get_marketplace)):
    catalogue = await list_vaccines(backend=marketplace.backend)
    return [vaccine.model_dump() for vaccine in catalogue]


def main():
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


# Run with: uvicorn pawmarket.app:app --reload --port 8080
if __name__ == "__main__":
    main()
