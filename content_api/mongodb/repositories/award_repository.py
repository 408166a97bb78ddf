"""Repository for awards."""

from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.schemas import AwardDocument, AwardType
from content_api.mongodb.store import ORDER_ASC
from content_api.ordering.partition import OrderingPolicy


class AwardRepository(OrderedRepository[AwardDocument]):
    policy = OrderingPolicy(collection="awards", entity="Award", flag_field="is_visible")
    document_type = AwardDocument

    async def list_by_type(self, award_type: AwardType) -> list[AwardDocument]:
        """Visible awards of one type, in display order."""
        return await self._list_visible({"type": award_type})

    async def list_by_year(self, year: str) -> list[AwardDocument]:
        """Visible awards of one year, in display order."""
        return await self._list_visible({"year": year})

    async def _list_visible(self, criteria: dict[str, str]) -> list[AwardDocument]:
        query = {**self.policy.ordered_partition().query, **criteria}
        return [
            self.to_document(raw)
            async for raw in self._manager.collection.find(query, sort=ORDER_ASC)
        ]
