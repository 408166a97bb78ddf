"""Image upload and download routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from content_api.api.schemas import UploadResponse
from content_api.auth.dependencies import get_current_admin
from content_api.mongodb.gridfs_service import (
    ImageFolder,
    ImageStorageService,
    StoredImage,
    get_image_storage,
)
from content_api.mongodb.schemas import ImageRef

logger = logging.getLogger(__name__)

router = APIRouter()

files_router = APIRouter()

ImagesDep = Annotated[ImageStorageService, Depends(get_image_storage)]


async def store_upload(images: ImageStorageService, upload: UploadFile, folder: ImageFolder) -> StoredImage:
    """Read an uploaded file and store it as an image."""
    contents = await upload.read()
    return await images.upload_image(
        contents,
        upload.filename or "image",
        upload.content_type or "application/octet-stream",
        folder,
    )


def image_ref(stored: StoredImage) -> ImageRef:
    return ImageRef(url=stored.url, public_id=stored.file_id)


@router.post("", response_model=UploadResponse, dependencies=[Depends(get_current_admin)])
async def upload_image(
    images: ImagesDep,
    image: UploadFile = File(...),
    folder: ImageFolder = Form(ImageFolder.GENERAL),
) -> UploadResponse:
    """Upload a standalone image, e.g. for hero slides or sponsor logos."""
    stored = await store_upload(images, image, folder)
    logger.info("Uploaded %s to %s as %s", stored.filename, folder, stored.file_id)
    return UploadResponse(
        file_id=stored.file_id,
        url=stored.url,
        public_id=stored.file_id,
        filename=stored.filename,
        size_bytes=stored.size_bytes,
    )


@files_router.get("/{file_id}")
async def download_image(file_id: str, images: ImagesDep) -> Response:
    """Serve a stored image."""
    found = await images.download_bytes(file_id)
    if found is None:
        raise HTTPException(status_code=404, detail="File not found")
    info, content = found
    return Response(
        content=content,
        media_type=info.content_type,
        headers={"Cache-Control": "public, max-age=86400"},
    )
