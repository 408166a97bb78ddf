"""MongoDB document schemas."""

from content_api.mongodb.schemas.documents import (
    AdminDocument,
    AwardDocument,
    AwardIcon,
    AwardType,
    BoardMemberDocument,
    ColoredText,
    CoverImage,
    EventDocument,
    HeroContentDocument,
    HighlightDocument,
    HomeEventDocument,
    ImageRef,
    MediaType,
    OrderedDocument,
    PageEventDocument,
    SeasonDocument,
    SponsorDocument,
    SponsorType,
    StoryHeroColors,
    StoryHeroDocument,
    StoryImageDocument,
    TimelinePhaseDocument,
    TimelineSectionDocument,
)

__all__ = [
    "AdminDocument",
    "AwardDocument",
    "AwardIcon",
    "AwardType",
    "BoardMemberDocument",
    "ColoredText",
    "CoverImage",
    "EventDocument",
    "HeroContentDocument",
    "HighlightDocument",
    "HomeEventDocument",
    "ImageRef",
    "MediaType",
    "OrderedDocument",
    "PageEventDocument",
    "SeasonDocument",
    "SponsorDocument",
    "SponsorType",
    "StoryHeroColors",
    "StoryHeroDocument",
    "StoryImageDocument",
    "TimelinePhaseDocument",
    "TimelineSectionDocument",
]
