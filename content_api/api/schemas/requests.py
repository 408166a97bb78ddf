"""API request schemas.

Server-managed fields (``_id``, ``order``, timestamps) are not declared, so
any client supplied values for them are dropped on parse.
"""

import re
from datetime import datetime
from typing import Annotated, Any
from urllib.parse import urlparse

from pydantic import AfterValidator, Field, StrictInt, model_validator
from pydantic_mongo import PydanticObjectId

from content_api.common.base_content_model import BaseRequestModel
from content_api.mongodb.schemas.documents import (
    AwardIcon,
    AwardType,
    ButtonActionType,
    MediaType,
    PhasePosition,
    SponsorType,
)

HEX_COLOR = re.compile(r"^#([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$")
TEXT_SIZE = re.compile(r"^text-\[\d+px\]$")
SCROLL_TARGET = re.compile(r"^#[\w-]+$")
ACADEMIC_YEAR = re.compile(r"^\d{4}-\d{4}$")


def _check_hex(value: str) -> str:
    if not HEX_COLOR.match(value):
        msg = "must be a hex colour such as #FBB859"
        raise ValueError(msg)
    return value


def _check_url(value: str) -> str:
    """Absolute http(s) URLs or site-relative paths."""
    if value.startswith("/"):
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        msg = "must be an absolute URL or a path starting with /"
        raise ValueError(msg)
    return value


def _check_text_size(value: str) -> str:
    if not TEXT_SIZE.match(value):
        msg = "must look like text-[16px]"
        raise ValueError(msg)
    return value


HexColor = Annotated[str, AfterValidator(_check_hex)]
UrlOrPath = Annotated[str, AfterValidator(_check_url)]
TextSize = Annotated[str, AfterValidator(_check_text_size)]


def to_fields(request: BaseRequestModel, *, partial: bool = True) -> dict[str, Any]:
    """Request fields ready to be stored.

    Partial dumps (updates) keep only what the client sent; full dumps
    (creates) include every default, nested ones too.
    """
    return request.model_dump(exclude_unset=partial, exclude_none=True)


class MoveRequest(BaseRequestModel):
    """Move one record to a new position."""

    order: StrictInt


class ReorderRequest(BaseRequestModel):
    """Renumber a partition to follow the given ids."""

    ids: list[str]


class LoginRequest(BaseRequestModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=1)


class ColoredTextIn(BaseRequestModel):
    text: str = Field(min_length=1)
    color: HexColor = "#606161"


class CoverImageIn(BaseRequestModel):
    url: str = Field(min_length=1)
    alt: str = ""


class EventCreateRequest(BaseRequestModel):
    title: ColoredTextIn
    description: ColoredTextIn
    date: ColoredTextIn
    cover_image: CoverImageIn
    content_area_color: HexColor = "#81C99C"
    url: str = ""
    active: bool = True


class EventUpdateRequest(BaseRequestModel):
    title: ColoredTextIn | None = None
    description: ColoredTextIn | None = None
    date: ColoredTextIn | None = None
    cover_image: CoverImageIn | None = None
    content_area_color: HexColor | None = None
    url: str | None = None
    active: bool | None = None


class EventTimeIn(BaseRequestModel):
    start: str = ""
    end: str = ""


class EventLocationIn(BaseRequestModel):
    venue: str = ""
    address: str = ""


class EventPriceIn(BaseRequestModel):
    regular: float = Field(default=0, ge=0)
    student: float = Field(default=0, ge=0)
    currency: str = "USD"


class EarlyBirdPriceIn(BaseRequestModel):
    amount: float = Field(default=0, ge=0)
    deadline: datetime | None = None


class PageEventCreateRequest(EventCreateRequest):
    event_date: datetime
    event_time: EventTimeIn = Field(default_factory=EventTimeIn)
    location: EventLocationIn = Field(default_factory=EventLocationIn)
    registration_link: str = ""
    attendee_count: int = Field(default=0, ge=0)
    max_attendees: int | None = Field(default=None, ge=1)
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    price: EventPriceIn | None = None
    early_bird_price: EarlyBirdPriceIn | None = None
    highlights: list[str] = Field(default_factory=list)


class PageEventUpdateRequest(EventUpdateRequest):
    event_date: datetime | None = None
    event_time: EventTimeIn | None = None
    location: EventLocationIn | None = None
    registration_link: str | None = None
    attendee_count: int | None = Field(default=None, ge=0)
    max_attendees: int | None = Field(default=None, ge=1)
    category: str | None = None
    tags: list[str] | None = None
    price: EventPriceIn | None = None
    early_bird_price: EarlyBirdPriceIn | None = None
    highlights: list[str] | None = None


class SizedTextIn(BaseRequestModel):
    text: str = ""
    color: HexColor = "#ffffff"
    size: TextSize = "text-[16px]"


class HeadingIn(SizedTextIn):
    text: str = Field(min_length=1)
    size: TextSize = "text-[64px]"


class SubheadingIn(SizedTextIn):
    size: TextSize = "text-[32px]"


class ButtonActionIn(BaseRequestModel):
    type: ButtonActionType
    target: str

    @model_validator(mode="after")
    def _check_target(self) -> "ButtonActionIn":
        if self.type == ButtonActionType.SCROLL:
            if not SCROLL_TARGET.match(self.target):
                msg = "scroll target must be an anchor such as #events"
                raise ValueError(msg)
        else:
            _check_url(self.target)
        return self


class HeroButtonIn(BaseRequestModel):
    text: str = Field(min_length=1)
    background_color: HexColor = "#FBB859"
    text_color: HexColor = "#ffffff"
    action: ButtonActionIn | None = None


class HeroCreateRequest(BaseRequestModel):
    """A hero slide; colours, text sizes and durations are validated."""

    media_type: MediaType
    media_url: UrlOrPath
    display_duration: int = Field(default=5000, ge=1000, le=30000)
    heading: HeadingIn
    subheading: SubheadingIn | None = None
    description: SizedTextIn | None = None
    button: HeroButtonIn | None = None


class HeroUpdateRequest(BaseRequestModel):
    media_type: MediaType | None = None
    media_url: UrlOrPath | None = None
    display_duration: int | None = Field(default=None, ge=1000, le=30000)
    heading: HeadingIn | None = None
    subheading: SubheadingIn | None = None
    description: SizedTextIn | None = None
    button: HeroButtonIn | None = None


class SponsorCreateRequest(BaseRequestModel):
    name: str = Field(min_length=1, max_length=200)
    type: SponsorType
    logo: CoverImageIn
    website: UrlOrPath
    active: bool = True


class SponsorUpdateRequest(BaseRequestModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    type: SponsorType | None = None
    logo: CoverImageIn | None = None
    website: UrlOrPath | None = None
    active: bool | None = None


class AwardCreateRequest(BaseRequestModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=500)
    year: str = Field(min_length=4, max_length=4)
    icon_type: AwardIcon = AwardIcon.TROPHY
    type: AwardType = AwardType.ACHIEVEMENT
    state: str = Field(default="", max_length=100)
    state_color: HexColor = "#3B82F6"
    organization: str = Field(default="", max_length=200)
    is_visible: bool = True


class AwardUpdateRequest(BaseRequestModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1, max_length=500)
    year: str | None = Field(default=None, min_length=4, max_length=4)
    icon_type: AwardIcon | None = None
    type: AwardType | None = None
    state: str | None = Field(default=None, max_length=100)
    state_color: HexColor | None = None
    organization: str | None = Field(default=None, max_length=200)
    is_visible: bool | None = None


class TimelineSectionCreateRequest(BaseRequestModel):
    title: str = Field(min_length=1, max_length=200)
    subtitle: str = ""
    background_color: HexColor = "#f8fafc"
    line_color: HexColor = "#e2e8f0"
    node_color: HexColor = "#FBB859"
    text_color: HexColor = "#1e293b"
    is_active: bool = True


class TimelineSectionUpdateRequest(BaseRequestModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    subtitle: str | None = None
    background_color: HexColor | None = None
    line_color: HexColor | None = None
    node_color: HexColor | None = None
    text_color: HexColor | None = None
    is_active: bool | None = None


class TimelinePhaseCreateRequest(BaseRequestModel):
    """A timeline phase; without ``section_id`` it joins the default section."""

    section_id: PydanticObjectId | None = None
    year: str = Field(min_length=1)
    headline: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image_url: str | None = None
    image_alt: str = ""
    background_color: HexColor = "#ffffff"
    text_color: HexColor = "#1e293b"
    accent_color: HexColor = "#FBB859"
    position: PhasePosition = PhasePosition.AUTO
    is_active: bool = True
    expandable: bool = False


class TimelinePhaseUpdateRequest(BaseRequestModel):
    section_id: PydanticObjectId | None = None
    year: str | None = Field(default=None, min_length=1)
    headline: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    image_url: str | None = None
    image_alt: str | None = None
    background_color: HexColor | None = None
    text_color: HexColor | None = None
    accent_color: HexColor | None = None
    position: PhasePosition | None = None
    is_active: bool | None = None
    expandable: bool | None = None


class SeasonCreateRequest(BaseRequestModel):
    academic_year: str = Field(pattern=ACADEMIC_YEAR.pattern)
    theme: str = Field(min_length=1, max_length=200)
    description: str = Field(default="", max_length=1000)
    badge_color: HexColor = "#606161"
    is_active: bool = True


class SeasonUpdateRequest(BaseRequestModel):
    theme: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    badge_color: HexColor | None = None
    is_active: bool | None = None


class BoardMemberCreateRequest(BaseRequestModel):
    name: str = Field(min_length=1, max_length=100)
    position: str = Field(min_length=1, max_length=100)
    is_leader: bool = False
    bio: str = Field(default="", max_length=500)
    profile_url: str = ""


class BoardMemberUpdateRequest(BaseRequestModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    position: str | None = Field(default=None, min_length=1, max_length=100)
    is_leader: bool | None = None
    bio: str | None = Field(default=None, max_length=500)
    profile_url: str | None = None


class HighlightCreateRequest(BaseRequestModel):
    title: str = Field(min_length=1, max_length=200)
    url: str = ""
    description: str = Field(default="", max_length=1000)


class HighlightUpdateRequest(BaseRequestModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    url: str | None = None
    description: str | None = Field(default=None, max_length=1000)


class StoryHeroColorsIn(BaseRequestModel):
    headline_color: HexColor | None = None
    headline_size: str | None = None
    hook_line_color: HexColor | None = None
    hook_line_size: str | None = None
    overlay_color: str | None = None
    overlay_opacity: float | None = Field(default=None, ge=0, le=1)
    arrow_background: str | None = None
    arrow_color: HexColor | None = None
    text_shadow: str | None = None
    fallback_background: HexColor | None = None


class StoryHeroUpdateRequest(BaseRequestModel):
    """Banner text and styling; images are managed through their own endpoints."""

    headline: str | None = Field(default=None, min_length=1, max_length=200)
    hook_line: str | None = Field(default=None, min_length=1, max_length=300)
    auto_scroll_speed: int | None = Field(default=None, ge=1000, le=30000)
    show_indicators: bool | None = None
    colors: StoryHeroColorsIn | None = None


class StoryImageCreateRequest(BaseRequestModel):
    url: UrlOrPath
    alt: str = Field(default="Story hero background", max_length=200)
    public_id: str | None = None
