"""
Remote image store - S3 compatible bucket (AWS S3, Cloudflare R2, MinIO).

Images are addressed by a `public_id` (the object key) and served from
`secure_url`. Review photos and company logos go through here.
"""
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


class ImageStorageError(Exception):
    pass


@dataclass
class StoredImage:
    secure_url: str
    public_id: str


def _get_s3_client():
    """
    Return a boto3 S3 client for the configured endpoint.
    Returns None when the image store is not configured.
    """
    if not settings.image_store_enabled:
        return None

    # Use signature s3v4 for compatibility (Cloudflare R2 & MinIO)
    return boto3.client(
        "s3",
        endpoint_url=settings.s3_endpoint or None,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=Config(signature_version="s3v4"),
        region_name=(settings.s3_region or None),
    )


class ImageStorage:
    def __init__(self, client=None):
        self.client = client if client is not None else _get_s3_client()
        self.bucket = settings.s3_bucket

    def public_url(self, key: str) -> str:
        if settings.s3_public_base_url:
            return f"{settings.s3_public_base_url.rstrip('/')}/{key}"
        if settings.s3_endpoint:
            return f"{settings.s3_endpoint.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def upload(self, content: bytes, filename: str, content_type: Optional[str], folder: str) -> StoredImage:
        """Upload image bytes under `folder/` with a unique key."""
        if self.client is None:
            raise ImageStorageError("Image storage is not configured")

        ext = Path(filename or "").suffix.lower()
        key = f"{folder}/{uuid.uuid4().hex}{ext}"
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            raise ImageStorageError(f"Upload of {filename} failed: {exc}") from exc

        return StoredImage(secure_url=self.public_url(key), public_id=key)

    def delete(self, public_id: str) -> None:
        if self.client is None:
            raise ImageStorageError("Image storage is not configured")
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except (BotoCoreError, ClientError) as exc:
            raise ImageStorageError(f"Delete of {public_id} failed: {exc}") from exc


# Singleton instance
_image_storage: ImageStorage = None


def get_image_storage() -> ImageStorage:
    """Get or create image storage (singleton pattern)"""
    global _image_storage
    if _image_storage is None:
        _image_storage = ImageStorage()
    return _image_storage
