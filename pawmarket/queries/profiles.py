"""
Profile queries.
"""

from typing import Optional
from loguru import logger

from ..schemas.profile import AuthenticatedUser, ContactInfo, Profile, ProfileUpdate
from ..utils.backend_client import BackendClient, BackendError, get_backend
from ..utils.helpers import utc_now_iso

TABLE = "profiles"


async def get_profile(user_id: str, backend: Optional[BackendClient] = None) -> Optional[Profile]:
    """Fetch a profile row, or None if the user has none yet."""
    backend = backend or get_backend()
    row = await backend.get(TABLE, user_id)
    if row is None:
        return None
    return Profile(**{k: v for k, v in row.items() if v is not None})


async def ensure_profile(user: AuthenticatedUser, backend: Optional[BackendClient] = None) -> Profile:
    """
    Make sure the user has a profile row before listings reference it.

    A missing row is created from the identity (name, falling back to the
    email). An existing row keeps its edited fields.

    Raises:
        BackendError: If the row cannot be read or written
    """
    backend = backend or get_backend()

    existing = await get_profile(user.id, backend=backend)
    if existing is not None and existing.full_name:
        return existing

    data = {"full_name": user.display_name()}
    if existing is None:
        data["created_at"] = utc_now_iso()
        if user.email:
            data["email"] = user.email

    try:
        row = await backend.upsert(TABLE, user.id, data)
    except BackendError as e:
        raise BackendError(f"Failed to create the user profile: {e}", code=e.code) from e

    logger.info(f"Ensured profile for user {user.id}")
    return Profile(**{k: v for k, v in row.items() if v is not None})


async def update_profile(
    user_id: str,
    update: ProfileUpdate,
    backend: Optional[BackendClient] = None,
) -> Profile:
    """
    Upsert the profile fields present in the update and stamp ``updated_at``.

    Fields the form did not send keep their stored value.
    """
    backend = backend or get_backend()
    data = {**update.model_dump(mode="json", exclude_unset=True), "updated_at": utc_now_iso()}
    row = await backend.upsert(TABLE, user_id, data)
    logger.info(f"Updated profile {user_id}")
    return Profile(**{k: v for k, v in row.items() if v is not None})


async def get_contact_info(owner_id: str, backend: Optional[BackendClient] = None) -> Optional[ContactInfo]:
    """Fetch the name, email and phone shown on a listing owner's contact card."""
    backend = backend or get_backend()
    rows = await backend.select(
        TABLE, filters={"id": owner_id}, fields=["full_name", "email", "phone"]
    )
    if not rows:
        return None
    row = rows[0]
    return ContactInfo(
        full_name=row.get("full_name"),
        email=row.get("email") or None,
        phone=row.get("phone") or None,
    )
