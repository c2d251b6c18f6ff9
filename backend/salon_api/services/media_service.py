"""
Salon API — Media Host Service (Cloudinary)
============================================

What:  Validates product image uploads and forwards them to Cloudinary;
       deletes images that are no longer referenced.
Why:   Keeps every media host call, and the upload rules, in one place.
How:   The Cloudinary SDK is configured once from settings. Its calls are
       blocking HTTP requests, so they run in the threadpool to keep the
       event loop free for other requests.
Who:   Called by ProductService on create, update and delete.

Upload rules:
    - Extension AND declared content type must both name jpeg, jpg, png or gif
    - Size must not exceed settings.max_image_size (5MB by default)
    A rejected file never reaches the media host.

Failure policy:
    - Upload failure → MediaStorageError (the product write is aborted)
    - Delete failure → logged and reported as False, never raised
    Nothing is retried.
"""

import io
import logging
import re
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import cloudinary
import cloudinary.uploader
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from salon_api.config import settings
from salon_api.exceptions import MediaStorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_FORMATS = ("jpeg", "jpg", "png", "gif")
ALLOWED_EXTENSIONS = {f".{fmt}" for fmt in ALLOWED_FORMATS}
_ALLOWED_TYPE_PATTERN = re.compile("|".join(ALLOWED_FORMATS))
_VERSION_SEGMENT = re.compile(r"^v\d+$")

# Folder assumed when a URL has no Cloudinary upload path
LEGACY_FOLDER = "product-images"


class UploadedImage(BaseModel):
    """Where the media host stored an image."""
    url: str
    public_id: str


class MediaService:
    """
    Thin wrapper around the Cloudinary uploader.

    Args:
        folder: Media host folder for all uploads (default: settings.cloudinary_folder)
        max_size: Upload size cap in bytes (default: settings.max_image_size)
    """

    def __init__(self, folder: Optional[str] = None, max_size: Optional[int] = None):
        self.folder = folder or settings.cloudinary_folder
        self.max_size = max_size or settings.max_image_size

        if settings.media_configured:
            cloudinary.config(
                cloud_name=settings.cloudinary_cloud_name,
                api_key=settings.cloudinary_api_key,
                api_secret=settings.cloudinary_api_secret,
                secure=True,
            )
            logger.info("MediaService configured for cloud=%s folder=%s",
                        settings.cloudinary_cloud_name, self.folder)
        else:
            logger.warning("Cloudinary credentials are not set; image uploads will fail")

    # ── Validation ────────────────────────────────────────────────────────

    def validate_image(self, filename: str, content_type: str, size: int) -> None:
        """
        Rejects files that are not images of an allowed type or are too large.

        Raises:
            ValidationError naming the invalid-file condition.
        """
        ext = PurePosixPath(filename or "").suffix.lower()
        mime = (content_type or "").lower()

        if ext not in ALLOWED_EXTENSIONS or not mime.startswith("image/") \
                or not _ALLOWED_TYPE_PATTERN.search(mime):
            raise ValidationError(
                message=(
                    "Invalid file: only image files are allowed "
                    f"({', '.join(ALLOWED_FORMATS)})."
                ),
                field="image",
                context={"extension": ext, "content_type": mime, "allowed": list(ALLOWED_FORMATS)},
            )

        if size > self.max_size:
            max_mb = self.max_size / (1024 * 1024)
            raise ValidationError(
                message=(
                    f"Invalid file: image size ({size / (1024 * 1024):.1f}MB) "
                    f"exceeds the maximum of {max_mb:.0f}MB."
                ),
                field="image",
                context={"max_size": self.max_size, "actual_size": size},
            )

    # ── Media host calls ──────────────────────────────────────────────────

    async def upload_image(self, filename: str, content_type: str, content: bytes) -> UploadedImage:
        """
        Validates and uploads an image.

        Returns:
            UploadedImage with the HTTPS delivery URL and the object identifier.

        Raises:
            ValidationError: file type or size not allowed
            MediaStorageError: the media host rejected or failed the upload
        """
        self.validate_image(filename, content_type, len(content))

        try:
            result = await run_in_threadpool(
                cloudinary.uploader.upload,
                io.BytesIO(content),
                folder=self.folder,
                allowed_formats=list(ALLOWED_FORMATS),
                resource_type="image",
            )
        except Exception as e:
            logger.error("Image upload failed for %s: %s", filename, str(e))
            raise MediaStorageError(context={"filename": filename, "error": str(e)}) from e

        url = result.get("secure_url") or result.get("url")
        public_id = result.get("public_id")
        if not url or not public_id:
            raise MediaStorageError(
                message="The image storage provider returned an incomplete response.",
                context={"filename": filename},
            )

        logger.info("Image uploaded: %s (%d bytes)", public_id, len(content))
        return UploadedImage(url=url, public_id=public_id)

    async def delete_image(self, public_id: Optional[str]) -> bool:
        """
        Best-effort deletion of an image. Never raises.

        Returns:
            True if the media host confirmed the deletion, False otherwise.
        """
        if not public_id:
            return False
        try:
            result = await run_in_threadpool(
                cloudinary.uploader.destroy, public_id, invalidate=True
            )
        except Exception as e:
            logger.warning("Failed to delete image %s: %s", public_id, str(e))
            return False

        if result.get("result") != "ok":
            logger.warning("Image %s was not deleted: %s", public_id, result.get("result"))
            return False

        logger.info("Image deleted: %s", public_id)
        return True

    # ── Identifier helpers ────────────────────────────────────────────────

    def public_id_from_url(self, url: Optional[str]) -> Optional[str]:
        """
        Derives the object identifier from a delivery URL.

        Only used for products stored before public_id was recorded. The
        folder is read from the URL path, not from settings.

        Examples:
            .../image/upload/v1/product-images/abc.jpg     → product-images/abc
            .../image/upload/c_fill,w_200/v1/shop/a/b.png  → shop/a/b
            https://cdn.example.com/abc.jpg                → product-images/abc
        """
        if not url:
            return None
        parts = [p for p in PurePosixPath(urlparse(url).path).parts if p != "/"]
        if not parts:
            return None
        stem = parts[-1].split(".")[0]
        if not stem:
            return None

        if "upload" not in parts:
            return f"{LEGACY_FOLDER}/{stem}"
        segments = parts[parts.index("upload") + 1:]
        versions = [i for i, p in enumerate(segments) if _VERSION_SEGMENT.match(p)]
        if versions:
            segments = segments[versions[0] + 1:]
        return "/".join(segments[:-1] + [stem])

    def resolve_public_id(self, public_id: Optional[str], image_url: Optional[str]) -> Optional[str]:
        return public_id or self.public_id_from_url(image_url)


media_service = MediaService()
