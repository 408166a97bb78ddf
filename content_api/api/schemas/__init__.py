"""API schemas for requests and responses."""

from content_api.api.schemas.requests import (
    LoginRequest,
    MoveRequest,
    ReorderRequest,
    to_fields,
)
from content_api.api.schemas.responses import (
    AdminResponse,
    GroupedSponsorsResponse,
    HealthResponse,
    ImageResponse,
    MessageResponse,
    PastEventsResponse,
    TimelineResponse,
    TokenResponse,
    UploadResponse,
)

__all__ = [
    "AdminResponse",
    "GroupedSponsorsResponse",
    "HealthResponse",
    "ImageResponse",
    "LoginRequest",
    "MessageResponse",
    "MoveRequest",
    "PastEventsResponse",
    "ReorderRequest",
    "TimelineResponse",
    "TokenResponse",
    "UploadResponse",
    "to_fields",
]
