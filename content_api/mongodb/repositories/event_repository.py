"""Repositories for the three event collections."""

import math
import re
from datetime import UTC, datetime
from typing import Any

from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.schemas import EventDocument, HomeEventDocument, PageEventDocument
from content_api.ordering.partition import OrderingPolicy

PAST_EVENT_SEARCH_FIELDS = ("title.text", "description.text", "location.venue", "location.address")


class EventRepository(OrderedRepository[EventDocument]):
    """Event cards; active ones are ordered, inactive ones sorted by recency."""

    policy = OrderingPolicy(collection="events", entity="Event", flag_field="active")
    document_type = EventDocument


class HomeEventRepository(OrderedRepository[HomeEventDocument]):
    policy = OrderingPolicy(collection="home_events", entity="Home event", flag_field="active")
    document_type = HomeEventDocument


class PageEventRepository(OrderedRepository[PageEventDocument]):
    """Events page entries, with featured and past event lookups."""

    policy = OrderingPolicy(collection="page_events", entity="Page event", flag_field="active")
    document_type = PageEventDocument

    async def get_featured(self, now: datetime | None = None) -> PageEventDocument | None:
        """The nearest upcoming active event, if any."""
        raw = await self._manager.collection.find_one(
            {"active": True, "event_date": {"$gte": now or datetime.now(UTC)}},
            sort=[("event_date", 1)],
        )
        return None if raw is None else self.to_document(raw)

    async def list_past(
        self,
        *,
        page: int = 1,
        limit: int = 12,
        search: str | None = None,
        category: str | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Active events that already happened, most recent first.

        Args:
            page: 1-based page number.
            limit: Page size.
            search: Case-insensitive text matched against title, description
                and location.
            category: Exact category filter; ``"all"`` disables it.

        Returns:
            ``{"events": [...], "pagination": {...}}``.
        """
        query: dict[str, Any] = {"active": True, "event_date": {"$lt": now or datetime.now(UTC)}}
        if search:
            pattern = re.escape(search)
            query["$or"] = [
                {name: {"$regex": pattern, "$options": "i"}} for name in PAST_EVENT_SEARCH_FIELDS
            ]
        if category and category != "all":
            query["category"] = category

        collection = self._manager.collection
        skip = (page - 1) * limit
        total = await collection.count(query)
        events = [
            self.to_document(raw)
            async for raw in collection.find(
                query, sort=[("event_date", -1)], skip=skip, limit=limit
            )
        ]
        return {
            "events": events,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit),
                "has_more": skip + len(events) < total,
            },
        }

    async def list_categories(self) -> list[str]:
        """Distinct non-empty categories of active events."""
        values = await self._manager.collection.distinct("category", {"active": True})
        return sorted(value for value in values if value)
