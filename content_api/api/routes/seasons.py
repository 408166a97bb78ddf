"""Season routes, including embedded board members and highlights."""

import logging
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile, status

from content_api.api.routes.ordered import build_ordered_router, repository_dependency
from content_api.api.routes.uploads import ImagesDep, image_ref, store_upload
from content_api.api.schemas import ImageResponse, MessageResponse, MoveRequest, ReorderRequest, to_fields
from content_api.api.schemas.requests import (
    BoardMemberCreateRequest,
    BoardMemberUpdateRequest,
    HighlightCreateRequest,
    HighlightUpdateRequest,
    SeasonCreateRequest,
    SeasonUpdateRequest,
)
from content_api.auth.dependencies import get_current_admin
from content_api.mongodb.gridfs_service import ImageFolder
from content_api.mongodb.repositories import BoardMemberRepository, HighlightRepository, SeasonRepository
from content_api.mongodb.schemas import BoardMemberDocument, HighlightDocument, ImageRef, SeasonDocument
from content_api.mongodb.store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = [Depends(get_current_admin)]


def get_board_members(store: Annotated[DocumentStore, Depends(get_document_store)]) -> BoardMemberRepository:
    return BoardMemberRepository.create(store)


def get_highlights(store: Annotated[DocumentStore, Depends(get_document_store)]) -> HighlightRepository:
    return HighlightRepository.create(store)


SeasonRepoDep = Annotated[SeasonRepository, Depends(repository_dependency(SeasonRepository))]
MembersDep = Annotated[BoardMemberRepository, Depends(get_board_members)]
HighlightsDep = Annotated[HighlightRepository, Depends(get_highlights)]


@router.get("/year/{academic_year}", response_model=SeasonDocument)
async def get_season_by_year(academic_year: str, repo: SeasonRepoDep) -> SeasonDocument:
    return await repo.get_by_academic_year(academic_year)


@router.post("/{season_id}/cover-image", response_model=ImageResponse, dependencies=admin_only)
async def upload_cover_image(
    season_id: str,
    repo: SeasonRepoDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
    image: UploadFile = File(...),
) -> ImageResponse:
    """Set the season's cover image, replacing any previous one."""
    season = await repo.get(season_id)
    stored = await store_upload(images, image, ImageFolder.SEASON_COVERS)
    ref = image_ref(stored)
    await repo.update_record(season_id, {"cover_image": ref.model_dump()})
    logger.info("[season=%s] Cover image set to %s", season_id, stored.file_id)
    background_tasks.add_task(images.delete_image_quietly, season.cover_image.public_id)
    return ImageResponse(message="Cover image uploaded successfully", image=ref)


@router.delete("/{season_id}/cover-image", response_model=MessageResponse, dependencies=admin_only)
async def delete_cover_image(
    season_id: str,
    repo: SeasonRepoDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    season = await repo.get(season_id)
    await repo.update_record(season_id, {"cover_image": ImageRef().model_dump()})
    background_tasks.add_task(images.delete_image_quietly, season.cover_image.public_id)
    return MessageResponse(message="Cover image deleted successfully")


@router.get("/{season_id}/board-members", response_model=list[BoardMemberDocument])
async def list_board_members(season_id: str, members: MembersDep) -> list[BoardMemberDocument]:
    return await members.list_items(season_id)


@router.post(
    "/{season_id}/board-members",
    response_model=BoardMemberDocument,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
async def add_board_member(
    season_id: str,
    request: BoardMemberCreateRequest,
    members: MembersDep,
) -> BoardMemberDocument:
    """Append a board member; a new leader takes over from the previous one."""
    return await members.add(season_id, to_fields(request, partial=False))


@router.put("/{season_id}/board-members/reorder/batch", response_model=list[BoardMemberDocument], dependencies=admin_only)
async def reorder_board_members(
    season_id: str,
    request: ReorderRequest,
    members: MembersDep,
) -> list[BoardMemberDocument]:
    return await members.reorder(season_id, request.ids)


@router.put("/{season_id}/board-members/{member_id}", response_model=BoardMemberDocument, dependencies=admin_only)
async def update_board_member(
    season_id: str,
    member_id: str,
    request: BoardMemberUpdateRequest,
    members: MembersDep,
) -> BoardMemberDocument:
    return await members.update(season_id, member_id, to_fields(request))


@router.patch(
    "/{season_id}/board-members/{member_id}/order",
    response_model=list[BoardMemberDocument],
    dependencies=admin_only,
)
async def move_board_member(
    season_id: str,
    member_id: str,
    request: MoveRequest,
    members: MembersDep,
) -> list[BoardMemberDocument]:
    return await members.move(season_id, member_id, request.order)


@router.patch(
    "/{season_id}/board-members/{member_id}/leader",
    response_model=list[BoardMemberDocument],
    dependencies=admin_only,
)
async def set_board_leader(season_id: str, member_id: str, members: MembersDep) -> list[BoardMemberDocument]:
    """Make one member the leader and clear the flag on everyone else."""
    return await members.set_leader(season_id, member_id)


@router.post(
    "/{season_id}/board-members/{member_id}/avatar",
    response_model=ImageResponse,
    dependencies=admin_only,
)
async def upload_board_member_avatar(
    season_id: str,
    member_id: str,
    members: MembersDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
    image: UploadFile = File(...),
) -> ImageResponse:
    member = await members.get(season_id, member_id)
    stored = await store_upload(images, image, ImageFolder.BOARD_MEMBERS)
    ref = image_ref(stored)
    await members.update(season_id, member_id, {"avatar": ref.model_dump()})
    background_tasks.add_task(images.delete_image_quietly, member.avatar.public_id)
    return ImageResponse(message="Avatar uploaded successfully", image=ref)


@router.delete("/{season_id}/board-members/{member_id}", response_model=MessageResponse, dependencies=admin_only)
async def remove_board_member(
    season_id: str,
    member_id: str,
    members: MembersDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    removed = await members.remove(season_id, member_id)
    background_tasks.add_task(images.delete_image_quietly, removed.avatar.public_id)
    return MessageResponse(message="Board member removed successfully")


@router.get("/{season_id}/highlights", response_model=list[HighlightDocument])
async def list_highlights(season_id: str, highlights: HighlightsDep) -> list[HighlightDocument]:
    return await highlights.list_items(season_id)


@router.post(
    "/{season_id}/highlights",
    response_model=HighlightDocument,
    status_code=status.HTTP_201_CREATED,
    dependencies=admin_only,
)
async def add_highlight(
    season_id: str,
    request: HighlightCreateRequest,
    highlights: HighlightsDep,
) -> HighlightDocument:
    return await highlights.add(season_id, to_fields(request, partial=False))


@router.put("/{season_id}/highlights/reorder/batch", response_model=list[HighlightDocument], dependencies=admin_only)
async def reorder_highlights(
    season_id: str,
    request: ReorderRequest,
    highlights: HighlightsDep,
) -> list[HighlightDocument]:
    return await highlights.reorder(season_id, request.ids)


@router.put("/{season_id}/highlights/{highlight_id}", response_model=HighlightDocument, dependencies=admin_only)
async def update_highlight(
    season_id: str,
    highlight_id: str,
    request: HighlightUpdateRequest,
    highlights: HighlightsDep,
) -> HighlightDocument:
    return await highlights.update(season_id, highlight_id, to_fields(request))


@router.patch(
    "/{season_id}/highlights/{highlight_id}/order",
    response_model=list[HighlightDocument],
    dependencies=admin_only,
)
async def move_highlight(
    season_id: str,
    highlight_id: str,
    request: MoveRequest,
    highlights: HighlightsDep,
) -> list[HighlightDocument]:
    return await highlights.move(season_id, highlight_id, request.order)


@router.post(
    "/{season_id}/highlights/{highlight_id}/image",
    response_model=ImageResponse,
    dependencies=admin_only,
)
async def upload_highlight_image(
    season_id: str,
    highlight_id: str,
    highlights: HighlightsDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
    image: UploadFile = File(...),
) -> ImageResponse:
    highlight = await highlights.get(season_id, highlight_id)
    stored = await store_upload(images, image, ImageFolder.HIGHLIGHTS)
    ref = image_ref(stored)
    await highlights.update(season_id, highlight_id, {"image": ref.model_dump()})
    background_tasks.add_task(images.delete_image_quietly, highlight.image.public_id)
    return ImageResponse(message="Image uploaded successfully", image=ref)


@router.delete("/{season_id}/highlights/{highlight_id}", response_model=MessageResponse, dependencies=admin_only)
async def remove_highlight(
    season_id: str,
    highlight_id: str,
    highlights: HighlightsDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    removed = await highlights.remove(season_id, highlight_id)
    background_tasks.add_task(images.delete_image_quietly, removed.image.public_id)
    return MessageResponse(message="Highlight removed successfully")


build_ordered_router(SeasonRepository, SeasonCreateRequest, SeasonUpdateRequest, router=router)
