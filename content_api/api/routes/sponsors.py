"""Sponsor and partner routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from content_api.api.routes.ordered import build_ordered_router, repository_dependency
from content_api.api.schemas import GroupedSponsorsResponse
from content_api.api.schemas.requests import SponsorCreateRequest, SponsorUpdateRequest
from content_api.auth.dependencies import get_current_admin
from content_api.mongodb.repositories import SponsorRepository
from content_api.mongodb.schemas import SponsorDocument

router = APIRouter()

SponsorRepoDep = Annotated[SponsorRepository, Depends(repository_dependency(SponsorRepository))]


@router.get("", response_model=GroupedSponsorsResponse)
@router.get("/active", response_model=GroupedSponsorsResponse)
async def list_active_sponsors(repo: SponsorRepoDep) -> GroupedSponsorsResponse:
    """Active sponsors and partners, grouped by type."""
    return GroupedSponsorsResponse.model_validate(await repo.list_grouped())


@router.get("/admin", response_model=list[SponsorDocument], dependencies=[Depends(get_current_admin)])
async def list_admin_sponsors(repo: SponsorRepoDep) -> list[SponsorDocument]:
    """Active sponsors, active partners, then inactive entries by recency."""
    return await repo.list_admin_all()


build_ordered_router(
    SponsorRepository,
    SponsorCreateRequest,
    SponsorUpdateRequest,
    list_routes=False,
    router=router,
)
