"""Hero carousel routes."""

from content_api.api.routes.ordered import build_ordered_router
from content_api.api.schemas.requests import HeroCreateRequest, HeroUpdateRequest
from content_api.mongodb.repositories import HeroRepository

router = build_ordered_router(HeroRepository, HeroCreateRequest, HeroUpdateRequest)
