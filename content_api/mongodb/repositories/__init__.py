"""MongoDB repositories for website content."""

from content_api.mongodb.repositories.award_repository import AwardRepository
from content_api.mongodb.repositories.event_repository import (
    EventRepository,
    HomeEventRepository,
    PageEventRepository,
)
from content_api.mongodb.repositories.hero_repository import HeroRepository
from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.repositories.season_repository import (
    BoardMemberRepository,
    HighlightRepository,
    SeasonRepository,
)
from content_api.mongodb.repositories.sponsor_repository import SponsorRepository
from content_api.mongodb.repositories.story_hero_repository import (
    StoryHeroRepository,
    StoryImageRepository,
)
from content_api.mongodb.repositories.timeline_repository import (
    TimelinePhaseRepository,
    TimelineSectionRepository,
)

__all__ = [
    "AwardRepository",
    "BoardMemberRepository",
    "EventRepository",
    "HeroRepository",
    "HighlightRepository",
    "HomeEventRepository",
    "OrderedRepository",
    "PageEventRepository",
    "SeasonRepository",
    "SponsorRepository",
    "StoryHeroRepository",
    "StoryImageRepository",
    "TimelinePhaseRepository",
    "TimelineSectionRepository",
]
