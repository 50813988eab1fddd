"""
Listing image uploads.
"""

from typing import Optional
from loguru import logger

from ..utils.backend_client import BackendClient, get_backend
from ..utils.helpers import build_object_name


async def upload_listing_image(
    bucket: str,
    file_name: str,
    content: bytes,
    content_type: Optional[str] = None,
    backend: Optional[BackendClient] = None,
) -> str:
    """
    Upload an image under a fresh ``<uuid4>.<ext>`` name and return its public URL.

    Args:
        bucket: Logical bucket (``pets``, ``services`` or ``avatars``)
        file_name: Original file name, used for the extension only
        content: Raw image bytes
        content_type: MIME type reported by the client
        backend: Backend to upload to (defaults to the shared backend)

    Returns:
        Public URL of the stored object
    """
    backend = backend or get_backend()
    object_name = build_object_name(file_name)

    await backend.upload(
        bucket, object_name, content, content_type or "application/octet-stream"
    )
    public_url = backend.get_public_url(bucket, object_name)
    logger.info(f"Uploaded listing image {file_name} as {bucket}/{object_name}")
    return public_url
