"""Repository for hero carousel slides."""

from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.schemas import HeroContentDocument
from content_api.ordering.partition import OrderingPolicy


class HeroRepository(OrderedRepository[HeroContentDocument]):
    """Hero slides form a single ordered sequence with no activation flag."""

    policy = OrderingPolicy(collection="hero_contents", entity="Hero content")
    document_type = HeroContentDocument
