"""Event routes: website events, home page events and events page entries."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from content_api.api.routes.ordered import build_ordered_router, repository_dependency
from content_api.api.schemas import PastEventsResponse
from content_api.api.schemas.requests import (
    EventCreateRequest,
    EventUpdateRequest,
    PageEventCreateRequest,
    PageEventUpdateRequest,
)
from content_api.mongodb.repositories import EventRepository, HomeEventRepository, PageEventRepository
from content_api.mongodb.schemas import PageEventDocument

router = build_ordered_router(EventRepository, EventCreateRequest, EventUpdateRequest)

home_router = build_ordered_router(HomeEventRepository, EventCreateRequest, EventUpdateRequest)

page_router = APIRouter()

PageEventRepoDep = Annotated[PageEventRepository, Depends(repository_dependency(PageEventRepository))]


@page_router.get("/featured", response_model=PageEventDocument | None)
async def get_featured_event(repo: PageEventRepoDep) -> PageEventDocument | None:
    """The nearest upcoming event, or ``null`` when none is scheduled."""
    return await repo.get_featured()


@page_router.get("/past", response_model=PastEventsResponse)
async def list_past_events(
    repo: PageEventRepoDep,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 12,
    search: str | None = None,
    category: str | None = None,
) -> PastEventsResponse:
    """Past events, most recent first, with search and category filters."""
    result = await repo.list_past(page=page, limit=limit, search=search, category=category)
    return PastEventsResponse.model_validate(result)


@page_router.get("/categories", response_model=list[str])
async def list_event_categories(repo: PageEventRepoDep) -> list[str]:
    return await repo.list_categories()


build_ordered_router(
    PageEventRepository,
    PageEventCreateRequest,
    PageEventUpdateRequest,
    router=page_router,
)
