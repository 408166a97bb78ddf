"""API response schemas."""

from pydantic import Field

from content_api.common.base_content_model import BaseContentModel
from content_api.mongodb.schemas import (
    AdminDocument,
    ImageRef,
    PageEventDocument,
    SponsorDocument,
    TimelinePhaseDocument,
    TimelineSectionDocument,
)


class MessageResponse(BaseContentModel):
    message: str


class TokenResponse(BaseContentModel):
    """Response after a successful admin login."""

    token: str
    token_type: str = "bearer"


class AdminResponse(BaseContentModel):
    id: str
    email: str

    @classmethod
    def from_document(cls, doc: AdminDocument) -> "AdminResponse":
        return cls(id=str(doc.id), email=doc.email)


class UploadResponse(BaseContentModel):
    """Response after an image upload."""

    file_id: str
    url: str
    public_id: str
    filename: str
    size_bytes: int


class ImageResponse(BaseContentModel):
    message: str
    image: ImageRef


class GroupedSponsorsResponse(BaseContentModel):
    """Active sponsors and partners, each in display order."""

    sponsors: list[SponsorDocument] = Field(default_factory=list)
    partners: list[SponsorDocument] = Field(default_factory=list)


class Pagination(BaseContentModel):
    page: int
    limit: int
    total: int
    pages: int
    has_more: bool


class PastEventsResponse(BaseContentModel):
    events: list[PageEventDocument]
    pagination: Pagination


class TimelineResponse(BaseContentModel):
    """Active sections with the active phases of each, in display order."""

    sections: list[TimelineSectionDocument]
    phases: list[TimelinePhaseDocument]


class HealthResponse(BaseContentModel):
    status: str
    database: str
