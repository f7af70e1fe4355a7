# app/core/storage_utils.py
import logging
import uuid
from functools import lru_cache
from typing import Protocol

from app.core.config import get_settings
from app.core.exceptions import StorageError
from app.core.supabase_client import supabase_admin

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    def upload(self, file_bytes: bytes, ext: str, content_type: str) -> str:
        """Store bytes and return a public URL."""
        ...


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4.

    Args:
        ext: File extension without dot (e.g. "png", "jpg")

    Returns:
        A filename like "<uuid4>.png"
    """
    return f"{uuid.uuid4()}.{ext}"


class SupabaseObjectStore:
    """
    Product image uploads to a Supabase Storage bucket.

    Objects land under `products/<uuid>.<ext>`; every upload gets a fresh
    name so replacing a product image never overwrites another record's file.
    """

    def __init__(self, bucket: str, folder: str = "products"):
        self.bucket = bucket
        self.folder = folder

    def upload(self, file_bytes: bytes, ext: str, content_type: str) -> str:
        """
        Upload raw bytes and return the public URL.

        Raises:
            StorageError: if the client is not configured or the upload fails.
        """
        path = f"{self.folder}/{generate_filename(ext)}"
        try:
            bucket = supabase_admin().storage.from_(self.bucket)
            bucket.upload(path, file_bytes, {"content-type": content_type})
            url = bucket.get_public_url(path)
        except Exception as e:
            logger.error(f"❌ Upload to {self.bucket}/{path} failed: {e}")
            raise StorageError() from e

        logger.info(f"✅ Uploaded image to {self.bucket}/{path}")
        return url


@lru_cache
def get_object_store() -> ObjectStore:
    """FastAPI dependency returning the process-wide object store."""
    return SupabaseObjectStore(bucket=get_settings().STORAGE_BUCKET)
