"""MongoDB document schemas for website content."""

from datetime import UTC, datetime
from enum import StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field
from pydantic_mongo import PydanticObjectId


def _now() -> datetime:
    return datetime.now(UTC)


class DocumentModel(BaseModel):
    """Shared config for stored documents and their embedded parts."""

    model_config = ConfigDict(populate_by_name=True)


class ImageRef(DocumentModel):
    """An image held by the image store; ``public_id`` is its delete handle."""

    url: str | None = None
    public_id: str | None = None


class CoverImage(DocumentModel):
    url: str
    alt: str = ""


class ColoredText(DocumentModel):
    text: str
    color: str = "#606161"


class OrderedDocument(DocumentModel):
    """Fields every ordered record carries."""

    id: PydanticObjectId | None = Field(default=None, alias="_id")
    order: int = 0

    # Timestamps
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class EventDocument(OrderedDocument):
    """An event card shown on the website."""

    title: ColoredText
    description: ColoredText
    date: ColoredText
    cover_image: CoverImage
    content_area_color: str = "#81C99C"
    url: str = ""
    active: bool = True


class HomeEventDocument(EventDocument):
    """An event in the home page "Upcoming Events" section."""


class EventTime(DocumentModel):
    start: str = ""
    end: str = ""


class EventLocation(DocumentModel):
    venue: str = ""
    address: str = ""


class EventPrice(DocumentModel):
    regular: float = 0
    student: float = 0
    currency: str = "USD"


class EarlyBirdPrice(DocumentModel):
    amount: float = 0
    deadline: datetime | None = None


class PageEventDocument(EventDocument):
    """An event on the events page (featured and past events)."""

    event_date: datetime
    event_time: EventTime = Field(default_factory=EventTime)
    location: EventLocation = Field(default_factory=EventLocation)
    registration_link: str = ""
    attendee_count: int = 0
    max_attendees: int | None = None
    category: str = ""
    tags: list[str] = Field(default_factory=list)
    price: EventPrice | None = None
    early_bird_price: EarlyBirdPrice | None = None
    highlights: list[str] = Field(default_factory=list)


class MediaType(StrEnum):
    IMAGE = auto()
    GIF = auto()
    VIDEO = auto()


class ButtonActionType(StrEnum):
    URL = auto()
    SCROLL = auto()


class SizedText(DocumentModel):
    text: str = ""
    color: str = "#ffffff"
    size: str = "text-[16px]"


class HeadingText(SizedText):
    size: str = "text-[64px]"


class SubheadingText(SizedText):
    size: str = "text-[32px]"


class ButtonAction(DocumentModel):
    type: ButtonActionType = ButtonActionType.URL
    target: str | None = None


class HeroButton(DocumentModel):
    text: str | None = None
    background_color: str = "#FBB859"
    text_color: str = "#ffffff"
    action: ButtonAction | None = None


class HeroContentDocument(OrderedDocument):
    """One slide of the home page hero carousel."""

    media_type: MediaType
    media_url: str
    display_duration: int = 5000
    heading: HeadingText
    subheading: SubheadingText | None = None
    description: SizedText | None = None
    button: HeroButton | None = None


class SponsorType(StrEnum):
    SPONSOR = auto()
    PARTNER = auto()


class SponsorDocument(OrderedDocument):
    """A sponsor or partner logo; ordered separately per type."""

    name: str
    type: SponsorType
    logo: CoverImage
    website: str
    active: bool = True


class AwardType(StrEnum):
    GOLD = auto()
    SILVER = auto()
    BRONZE = auto()
    SPECIAL = auto()
    ACHIEVEMENT = auto()


class AwardIcon(StrEnum):
    TROPHY = auto()
    MEDAL = auto()
    STAR = auto()
    HEART = auto()
    CERTIFICATE = auto()
    CROWN = auto()


class AwardDocument(OrderedDocument):
    title: str
    description: str
    year: str
    icon_type: AwardIcon = AwardIcon.TROPHY
    type: AwardType = AwardType.ACHIEVEMENT
    state: str = ""
    state_color: str = "#3B82F6"
    organization: str = ""
    is_visible: bool = True


class PhasePosition(StrEnum):
    LEFT = auto()
    RIGHT = auto()
    AUTO = auto()


class TimelineSectionDocument(OrderedDocument):
    title: str = "Our Journey"
    subtitle: str = ""
    background_color: str = "#f8fafc"
    line_color: str = "#e2e8f0"
    node_color: str = "#FBB859"
    text_color: str = "#1e293b"
    is_active: bool = True


class TimelinePhaseDocument(OrderedDocument):
    """A milestone on the timeline; ordered within its section."""

    section_id: PydanticObjectId
    year: str
    headline: str
    description: str
    image_url: str | None = None
    image_alt: str = ""
    image: ImageRef | None = None
    background_color: str = "#ffffff"
    text_color: str = "#1e293b"
    accent_color: str = "#FBB859"
    position: PhasePosition = PhasePosition.AUTO
    is_active: bool = True
    expandable: bool = False


class BoardMemberDocument(DocumentModel):
    """A board member embedded in a season."""

    id: PydanticObjectId | None = Field(default=None, alias="_id")
    name: str
    position: str
    is_leader: bool = False
    avatar: ImageRef = Field(default_factory=ImageRef)
    bio: str = ""
    profile_url: str = ""
    order: int = 0


class HighlightDocument(DocumentModel):
    """A highlight embedded in a season."""

    id: PydanticObjectId | None = Field(default=None, alias="_id")
    title: str
    url: str = ""
    description: str = ""
    image: ImageRef = Field(default_factory=ImageRef)
    order: int = 0


class SeasonDocument(OrderedDocument):
    """An academic season with its board and highlights."""

    academic_year: str
    theme: str
    description: str = ""
    cover_image: ImageRef = Field(default_factory=ImageRef)
    badge_color: str = "#606161"
    is_active: bool = True
    board_members: list[BoardMemberDocument] = Field(default_factory=list)
    highlights: list[HighlightDocument] = Field(default_factory=list)

    @property
    def leader(self) -> BoardMemberDocument | None:
        for member in self.board_members:
            if member.is_leader:
                return member
        return self.board_members[0] if self.board_members else None


class StoryImageDocument(DocumentModel):
    """A background image of the story hero carousel."""

    id: PydanticObjectId | None = Field(default=None, alias="_id")
    url: str
    alt: str = "Story hero background"
    public_id: str | None = None
    order: int = 0


class StoryHeroColors(DocumentModel):
    headline_color: str = "#ffffff"
    headline_size: str = "text-5xl md:text-6xl"
    hook_line_color: str = "#f0f0f0"
    hook_line_size: str = "text-lg md:text-xl"
    overlay_color: str = "rgba(0, 0, 0, 0.4)"
    overlay_opacity: float = 0.4
    arrow_background: str = "rgba(255, 255, 255, 0.2)"
    arrow_color: str = "#ffffff"
    text_shadow: str = "2px 2px 4px rgba(0,0,0,0.3)"
    fallback_background: str = "#f5f5f5"


class StoryHeroDocument(DocumentModel):
    """The single active "Our Story" banner and its ordered images."""

    id: PydanticObjectId | None = Field(default=None, alias="_id")
    headline: str = "Our Story"
    hook_line: str = "From Day One to Today: Our Journey"
    images: list[StoryImageDocument] = Field(default_factory=list)
    auto_scroll_speed: int = 5000
    show_indicators: bool = False
    colors: StoryHeroColors = Field(default_factory=StoryHeroColors)
    is_active: bool = True

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class AdminDocument(DocumentModel):
    """An admin account allowed to edit content."""

    id: PydanticObjectId | None = Field(default=None, alias="_id")
    email: str
    password_hash: str
    created_at: datetime = Field(default_factory=_now)
