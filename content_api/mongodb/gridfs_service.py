"""GridFS service for storing uploaded images (covers, avatars, logos)."""

import logging
import time
from enum import StrEnum, auto
from pathlib import PurePath

from bson import ObjectId
from bson.errors import InvalidId
from gridfs.errors import NoFile
from motor.motor_asyncio import AsyncIOMotorGridFSBucket
from pymongo.errors import PyMongoError

from content_api.common.base_content_model import BaseContentModel
from content_api.mongodb.client import get_mongodb_client

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"})


class ImageFolder(StrEnum):
    """Logical folder an image is filed under."""

    GENERAL = auto()
    SEASON_COVERS = auto()
    BOARD_MEMBERS = auto()
    HIGHLIGHTS = auto()
    TIMELINE_PHASES = auto()


class StoredImage(BaseContentModel):
    """Information about an image stored in GridFS."""

    file_id: str
    filename: str
    folder: ImageFolder
    content_type: str
    size_bytes: int

    @property
    def url(self) -> str:
        return f"/api/files/{self.file_id}"


class ImageUploadError(Exception):
    """The image was rejected or could not be stored."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ImageStorageService:
    """Service for storing and retrieving images via GridFS."""

    def __init__(self, bucket_name: str | None = None) -> None:
        """Initialize the image storage service.

        Args:
            bucket_name: Name of the GridFS bucket. Defaults to the configured one.
        """
        self._bucket_name = bucket_name
        self._bucket: AsyncIOMotorGridFSBucket | None = None

    @property
    def bucket(self) -> AsyncIOMotorGridFSBucket:
        """Get the GridFS bucket instance."""
        if self._bucket is None:
            client = get_mongodb_client()
            self._bucket = AsyncIOMotorGridFSBucket(
                client.database,
                bucket_name=self._bucket_name or client.config.image_bucket_name,
                chunk_size_bytes=client.config.gridfs_chunk_size_bytes,
            )
        return self._bucket

    @property
    def max_size_bytes(self) -> int:
        return get_mongodb_client().config.max_upload_size_bytes

    async def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: str,
        folder: ImageFolder = ImageFolder.GENERAL,
    ) -> StoredImage:
        """Validate and store an image.

        Args:
            data: Raw image bytes.
            filename: Original filename from the client.
            content_type: MIME type reported by the client.
            folder: Logical folder for the image.

        Returns:
            StoredImage with the handle used for later deletion.

        Raises:
            ImageUploadError: If the file is not an allowed image, is too
                large, or could not be written.
        """
        if content_type not in ALLOWED_IMAGE_TYPES:
            msg = "Only image files are allowed"
            raise ImageUploadError(msg)
        if not data:
            msg = "No image file provided"
            raise ImageUploadError(msg)
        if len(data) > self.max_size_bytes:
            msg = f"Image exceeds {self.max_size_bytes // (1024 * 1024)}MB limit"
            raise ImageUploadError(msg)

        stem = PurePath(filename).stem or "image"
        stored_name = f"{folder}_{int(time.time() * 1000)}_{stem}"
        metadata = {"folder": str(folder), "content_type": content_type}

        try:
            file_id = await self.bucket.upload_from_stream(stored_name, data, metadata=metadata)
        except PyMongoError as e:
            logger.error("Image upload failed for %s: %s", filename, e, exc_info=True)
            msg = "Failed to upload image"
            raise ImageUploadError(msg, status_code=500) from e

        logger.info("Stored image %s as %s (%d bytes)", filename, file_id, len(data))
        return StoredImage(
            file_id=str(file_id),
            filename=stored_name,
            folder=folder,
            content_type=content_type,
            size_bytes=len(data),
        )

    async def download_bytes(self, file_id: str) -> tuple[StoredImage, bytes] | None:
        """Download an image with its metadata, or ``None`` if it does not exist."""
        try:
            stream = await self.bucket.open_download_stream(ObjectId(file_id))
        except (InvalidId, NoFile):
            return None
        metadata = stream.metadata or {}
        info = StoredImage(
            file_id=file_id,
            filename=stream.filename,
            folder=ImageFolder(metadata.get("folder", ImageFolder.GENERAL)),
            content_type=metadata.get("content_type", "application/octet-stream"),
            size_bytes=stream.length,
        )
        return info, await stream.read()

    async def delete_image(self, file_id: str) -> None:
        """Delete an image from GridFS.

        Args:
            file_id: The GridFS file ID.
        """
        await self.bucket.delete(ObjectId(file_id))

    async def delete_image_quietly(self, file_id: str | None) -> None:
        """Delete an image, logging instead of raising on failure."""
        if not file_id:
            return
        try:
            await self.delete_image(file_id)
        except (InvalidId, NoFile, PyMongoError) as e:
            logger.warning("Failed to delete image %s: %s", file_id, e)


_image_storage: ImageStorageService | None = None


def get_image_storage() -> ImageStorageService:
    """Get the image storage service (FastAPI dependency)."""
    global _image_storage
    if _image_storage is None:
        _image_storage = ImageStorageService()
    return _image_storage
