"""
Input validation and sanitization utilities.
"""

import os
import re
from typing import Any, Dict, Optional
from pydantic import ValidationError
from loguru import logger

from ..config import settings
from ..schemas.listing import NewPetListing, NewServiceListing
from ..schemas.profile import ProfileUpdate


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """
    Sanitize string input to prevent injection attacks.

    Args:
        value: Input string
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value)

    # Remove null bytes
    value = value.replace("\x00", "")

    # Truncate to max length
    value = value[:max_length]

    # Strip leading/trailing whitespace
    value = value.strip()

    return value


def validate_phone(phone: str) -> bool:
    """
    Validate phone number format.

    Args:
        phone: Phone number

    Returns:
        True if valid phone format
    """
    # Remove common formatting characters
    cleaned = re.sub(r"[^\d+]", "", phone)

    # Check if it's a reasonable length
    return 10 <= len(cleaned) <= 15


def validate_image_file(
    file_name: Optional[str], size: int
) -> tuple[bool, Optional[str]]:
    """
    Validate an uploaded listing image.

    Args:
        file_name: Original file name
        size: File size in bytes

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not file_name or not file_name.strip():
        return False, "Image must have a file name"

    if os.path.basename(file_name) != file_name:
        return False, f"Invalid file name: {file_name}"

    ext = os.path.splitext(file_name)[1].lstrip(".").lower()
    if ext not in settings.allowed_image_extensions:
        allowed = ", ".join(settings.allowed_image_extensions)
        return False, f"Unsupported image type '{ext}'. Allowed: {allowed}"

    if size <= 0:
        return False, "Image is empty"

    if size > settings.max_image_size_bytes:
        return False, f"Image exceeds {settings.max_image_size_bytes} bytes"

    return True, None


def validate_pet_listing(
    data: Dict[str, Any],
) -> tuple[bool, Optional[str], Optional[NewPetListing]]:
    """
    Validate the add-pet form.

    Args:
        data: Pet form data dictionary

    Returns:
        Tuple of (is_valid, error_message, listing)
    """
    try:
        data = dict(data)
        for field, max_length in (("name", 100), ("breed", 100), ("age", 50), ("location", 100)):
            if field in data and data[field] is not None:
                data[field] = sanitize_string(data[field], max_length)
        if data.get("description") is not None:
            data["description"] = sanitize_string(data["description"], 5000)

        listing = NewPetListing(**data)
        return True, None, listing

    except ValidationError as e:
        logger.warning(f"Pet listing validation failed: {e}")
        return False, str(e), None


def validate_service_listing(
    data: Dict[str, Any],
) -> tuple[bool, Optional[str], Optional[NewServiceListing]]:
    """
    Validate the add-service form.

    Args:
        data: Service form data dictionary

    Returns:
        Tuple of (is_valid, error_message, listing)
    """
    try:
        data = dict(data)
        for field, max_length in (("title", 150), ("category", 50), ("location", 100)):
            if field in data and data[field] is not None:
                data[field] = sanitize_string(data[field], max_length)
        if data.get("description") is not None:
            data["description"] = sanitize_string(data["description"], 5000)

        listing = NewServiceListing(**data)
        return True, None, listing

    except ValidationError as e:
        logger.warning(f"Service listing validation failed: {e}")
        return False, str(e), None


def validate_profile_update(
    data: Dict[str, Any],
) -> tuple[bool, Optional[str], Optional[ProfileUpdate]]:
    """
    Validate the settings tab form.

    Args:
        data: Profile form data dictionary

    Returns:
        Tuple of (is_valid, error_message, update)
    """
    try:
        data = dict(data)
        for field, max_length in (("full_name", 100), ("location", 100), ("bio", 1000)):
            if field in data and data[field] is not None:
                data[field] = sanitize_string(data[field], max_length)

        # Validate phone if provided
        if data.get("phone") and not validate_phone(data["phone"]):
            return False, "Invalid phone number format", None

        update = ProfileUpdate(**data)
        return True, None, update

    except ValidationError as e:
        logger.warning(f"Profile validation failed: {e}")
        return False, str(e), None
