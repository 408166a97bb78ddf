"""Route factory shared by every ordered content family."""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Depends, status

from content_api.api.schemas import MessageResponse, MoveRequest, ReorderRequest, to_fields
from content_api.auth.dependencies import get_current_admin
from content_api.common.base_content_model import BaseRequestModel
from content_api.mongodb.gridfs_service import ImageStorageService, get_image_storage
from content_api.mongodb.repositories import OrderedRepository
from content_api.mongodb.store import DocumentStore, get_document_store

logger = logging.getLogger(__name__)

ScopeDependency = Callable[..., Awaitable[dict[str, Any] | None]]


async def no_scope() -> None:
    return None


def repository_dependency(
    repository_type: type[OrderedRepository],
) -> Callable[[DocumentStore], OrderedRepository]:
    """FastAPI dependency building ``repository_type`` over the request's store."""

    def _get_repository(store: Annotated[DocumentStore, Depends(get_document_store)]) -> OrderedRepository:
        return repository_type(store)

    return _get_repository


def build_ordered_router(
    repository_type: type[OrderedRepository],
    create_model: type[BaseRequestModel],
    update_model: type[BaseRequestModel],
    *,
    scope: ScopeDependency = no_scope,
    list_routes: bool = True,
    router: APIRouter | None = None,
) -> APIRouter:
    """Build the list/get/create/update/toggle/move/reorder/delete routes.

    Args:
        repository_type: Repository of the family.
        create_model: Body schema for ``POST``.
        update_model: Body schema for ``PUT``; only the sent fields are applied.
        scope: Dependency resolving the partition scope of listings and
            batch reorders from the request.
        list_routes: Set to ``False`` when the family provides its own
            public and admin listings.
        router: Router to add the routes to, after any routes it already
            declares; a new one is created when omitted.
    """
    if router is None:
        router = APIRouter()
    document_type = repository_type.document_type
    admin_only = [Depends(get_current_admin)]

    RepoDep = Annotated[OrderedRepository, Depends(repository_dependency(repository_type))]
    ScopeDep = Annotated[dict[str, Any] | None, Depends(scope)]

    if list_routes:

        @router.get("", response_model=list[document_type])
        async def list_public(repo: RepoDep, scope_values: ScopeDep) -> list[Any]:
            """Active records in display order."""
            return await repo.list_public(scope_values)

        @router.get("/admin", response_model=list[document_type], dependencies=admin_only)
        async def list_admin(repo: RepoDep, scope_values: ScopeDep) -> list[Any]:
            """Active records in display order, then inactive ones, newest first."""
            return await repo.list_admin(scope_values)

    @router.get("/{record_id}", response_model=document_type)
    async def get_record(record_id: str, repo: RepoDep) -> Any:
        return await repo.get(record_id)

    @router.post(
        "",
        response_model=document_type,
        status_code=status.HTTP_201_CREATED,
        dependencies=admin_only,
    )
    async def create_record(request: create_model, repo: RepoDep) -> Any:  # type: ignore[valid-type]
        """Create a record at the end of its partition."""
        return await repo.create_record(to_fields(request, partial=False))

    @router.put("/reorder/batch", response_model=list[document_type], dependencies=admin_only)
    async def reorder_records(request: ReorderRequest, repo: RepoDep, scope_values: ScopeDep) -> list[Any]:
        """Renumber a whole partition to follow the given ids."""
        return await repo.reorder(request.ids, scope_values)

    @router.put("/{record_id}", response_model=document_type, dependencies=admin_only)
    async def update_record(record_id: str, request: update_model, repo: RepoDep) -> Any:  # type: ignore[valid-type]
        return await repo.update_record(record_id, to_fields(request))

    if repository_type.policy.flag_field is not None:

        @router.patch("/{record_id}/toggle-active", response_model=list[document_type], dependencies=admin_only)
        async def toggle_record(record_id: str, repo: RepoDep) -> list[Any]:
            """Flip activation; returns the refreshed admin listing."""
            toggled = await repo.toggle_record(record_id)
            return await repo.list_admin_for(toggled)

    @router.patch("/{record_id}/order", response_model=list[document_type], dependencies=admin_only)
    async def move_record(record_id: str, request: MoveRequest, repo: RepoDep) -> list[Any]:
        """Move a record to a new position; returns the refreshed admin listing."""
        moved = await repo.move_record(record_id, request.order)
        return await repo.list_admin_for(moved)

    @router.delete("/{record_id}", response_model=MessageResponse, dependencies=admin_only)
    async def delete_record(
        record_id: str,
        repo: RepoDep,
        images: Annotated[ImageStorageService, Depends(get_image_storage)],
        background_tasks: BackgroundTasks,
    ) -> MessageResponse:
        """Delete a record; its images are released after the response."""
        _, handles = await repo.delete_with_assets(record_id)
        if handles:
            logger.info("[%s=%s] Releasing %d image(s)", repo.entity, record_id, len(handles))
        for handle in handles:
            background_tasks.add_task(images.delete_image_quietly, handle)
        return MessageResponse(message=f"{repo.entity} deleted successfully")

    return router
