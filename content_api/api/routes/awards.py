"""Award routes."""

from typing import Annotated

from fastapi import APIRouter, Depends

from content_api.api.routes.ordered import build_ordered_router, repository_dependency
from content_api.api.schemas.requests import AwardCreateRequest, AwardUpdateRequest
from content_api.mongodb.repositories import AwardRepository
from content_api.mongodb.schemas import AwardDocument, AwardType

router = APIRouter()

AwardRepoDep = Annotated[AwardRepository, Depends(repository_dependency(AwardRepository))]


@router.get("/type/{award_type}", response_model=list[AwardDocument])
async def list_awards_by_type(award_type: AwardType, repo: AwardRepoDep) -> list[AwardDocument]:
    return await repo.list_by_type(award_type)


@router.get("/year/{year}", response_model=list[AwardDocument])
async def list_awards_by_year(year: str, repo: AwardRepoDep) -> list[AwardDocument]:
    return await repo.list_by_year(year)


build_ordered_router(AwardRepository, AwardCreateRequest, AwardUpdateRequest, router=router)
