"""Story hero routes: the "Our Story" banner and its ordered background images."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, status

from content_api.api.routes.uploads import ImagesDep
from content_api.api.schemas import MessageResponse, MoveRequest, ReorderRequest, to_fields
from content_api.api.schemas.requests import StoryHeroUpdateRequest, StoryImageCreateRequest
from content_api.auth.dependencies import get_current_admin
from content_api.mongodb.repositories import StoryHeroRepository, StoryImageRepository
from content_api.mongodb.schemas import StoryHeroDocument, StoryImageDocument
from content_api.mongodb.store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = [Depends(get_current_admin)]


def get_story_hero(store: Annotated[DocumentStore, Depends(get_document_store)]) -> StoryHeroRepository:
    return StoryHeroRepository.create(store)


def get_story_images(store: Annotated[DocumentStore, Depends(get_document_store)]) -> StoryImageRepository:
    return StoryImageRepository.create(store)


StoryHeroDep = Annotated[StoryHeroRepository, Depends(get_story_hero)]
StoryImagesDep = Annotated[StoryImageRepository, Depends(get_story_images)]


@router.get("", response_model=StoryHeroDocument)
async def get_story_hero_content(repo: StoryHeroDep) -> StoryHeroDocument:
    """The active story hero with images in order, created with defaults if missing."""
    return await repo.get_or_create_active()


@router.put("", response_model=StoryHeroDocument, dependencies=admin_only)
async def update_story_hero(request: StoryHeroUpdateRequest, repo: StoryHeroDep) -> StoryHeroDocument:
    return await repo.update_content(to_fields(request))


@router.delete("", response_model=MessageResponse, dependencies=admin_only)
async def delete_story_hero(
    repo: StoryHeroDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    _, handles = await repo.delete_active()
    for handle in handles:
        background_tasks.add_task(images.delete_image_quietly, handle)
    return MessageResponse(message="Story hero deleted successfully")


@router.get("/images", response_model=list[StoryImageDocument])
async def list_story_images(story_images: StoryImagesDep) -> list[StoryImageDocument]:
    return await story_images.list_items()


@router.post(
    "/images",
    response_model=StoryImageDocument,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
async def add_story_image(request: StoryImageCreateRequest, story_images: StoryImagesDep) -> StoryImageDocument:
    """Append an image after the current last one."""
    return await story_images.add(to_fields(request, partial=False))


@router.api_route(
    "/images/reorder",
    methods=["PUT", "PATCH"],
    response_model=list[StoryImageDocument],
    dependencies=admin_only,
)
async def reorder_story_images(request: ReorderRequest, story_images: StoryImagesDep) -> list[StoryImageDocument]:
    """Renumber every image; ``ids`` must list each current image exactly once."""
    return await story_images.reorder(request.ids)


@router.patch("/images/{image_id}/order", response_model=list[StoryImageDocument], dependencies=admin_only)
async def move_story_image(
    image_id: str,
    request: MoveRequest,
    story_images: StoryImagesDep,
) -> list[StoryImageDocument]:
    return await story_images.move(image_id, request.order)


@router.delete("/images/{image_id}", response_model=MessageResponse, dependencies=admin_only)
async def remove_story_image(
    image_id: str,
    story_images: StoryImagesDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    removed = await story_images.remove(image_id)
    logger.info("Story image %s removed", removed.id)
    background_tasks.add_task(images.delete_image_quietly, removed.public_id)
    return MessageResponse(message="Image removed successfully")
