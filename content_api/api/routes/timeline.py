"""Timeline routes: sections and the phases ordered within each section."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile

from content_api.api.routes.ordered import build_ordered_router, repository_dependency
from content_api.api.routes.uploads import ImagesDep, image_ref, store_upload
from content_api.api.schemas import ImageResponse, MessageResponse, TimelineResponse
from content_api.api.schemas.requests import (
    TimelinePhaseCreateRequest,
    TimelinePhaseUpdateRequest,
    TimelineSectionCreateRequest,
    TimelineSectionUpdateRequest,
)
from content_api.auth.dependencies import get_current_admin
from content_api.mongodb.gridfs_service import ImageFolder
from content_api.mongodb.repositories import TimelinePhaseRepository, TimelineSectionRepository
from content_api.mongodb.store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)

router = APIRouter()

PhaseRepoDep = Annotated[TimelinePhaseRepository, Depends(repository_dependency(TimelinePhaseRepository))]
admin_only = [Depends(get_current_admin)]


async def phase_scope(
    store: Annotated[DocumentStore, Depends(get_document_store)],
    section_id: str | None = None,
) -> dict[str, Any]:
    """Scope of phase listings: the ``section_id`` query parameter or the default section."""
    return await TimelinePhaseRepository(store).resolve_scope(section_id)


@router.get("", response_model=TimelineResponse)
async def get_timeline(repo: PhaseRepoDep) -> TimelineResponse:
    """Active sections and their active phases, in display order."""
    sections = await repo.sections.list_public()
    phases = await repo.list_for_sections(sections)
    return TimelineResponse(sections=sections, phases=phases)


@router.post("/phases/{phase_id}/image", response_model=ImageResponse, dependencies=admin_only)
async def upload_phase_image(
    phase_id: str,
    repo: PhaseRepoDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
    image: UploadFile = File(...),
) -> ImageResponse:
    """Attach an image to a phase, replacing any previous one."""
    phase = await repo.get(phase_id)
    stored = await store_upload(images, image, ImageFolder.TIMELINE_PHASES)
    ref = image_ref(stored)
    await repo.update_record(phase_id, {"image": ref.model_dump(), "image_url": ref.url})
    logger.info("[phase=%s] Image set to %s", phase_id, stored.file_id)
    for handle in repo.image_handles(phase):
        background_tasks.add_task(images.delete_image_quietly, handle)
    return ImageResponse(message="Image uploaded successfully", image=ref)


@router.delete("/phases/{phase_id}/image", response_model=MessageResponse, dependencies=admin_only)
async def delete_phase_image(
    phase_id: str,
    repo: PhaseRepoDep,
    images: ImagesDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    phase = await repo.get(phase_id)
    await repo.update_record(phase_id, {"image": None, "image_url": None})
    for handle in repo.image_handles(phase):
        background_tasks.add_task(images.delete_image_quietly, handle)
    return MessageResponse(message="Image deleted successfully")


router.include_router(
    build_ordered_router(
        TimelineSectionRepository,
        TimelineSectionCreateRequest,
        TimelineSectionUpdateRequest,
    ),
    prefix="/sections",
)
router.include_router(
    build_ordered_router(
        TimelinePhaseRepository,
        TimelinePhaseCreateRequest,
        TimelinePhaseUpdateRequest,
        scope=phase_scope,
    ),
    prefix="/phases",
)
