"""Lazy, restartable listings over partitions."""

import logging
from collections.abc import AsyncIterator
from typing import Any

from content_api.mongodb.store import ORDER_ASC, RECENCY_DESC, CollectionGateway
from content_api.ordering.errors import InvariantViolationError
from content_api.ordering.partition import Partition

logger = logging.getLogger(__name__)


class OrderedListing:
    """Async-iterable view of one partition.

    Nothing is read until iteration starts, and every ``async for`` issues a
    fresh query, so the same listing can be iterated again after writes.
    Ordered partitions are checked for density while streaming. A strict
    listing raises on a gap or duplicate; a lenient one (public pages, read
    outside any transaction and possibly overlapping a commit) logs it and
    keeps streaming.
    """

    def __init__(self, collection: CollectionGateway, partition: Partition, *, strict: bool = True) -> None:
        self._collection = collection
        self._partition = partition
        self._strict = strict

    @property
    def partition(self) -> Partition:
        return self._partition

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[dict[str, Any]]:
        sort = ORDER_ASC if self._partition.ordered else RECENCY_DESC
        expected = 0
        async for document in self._collection.find(self._partition.query, sort=sort):
            if self._partition.ordered:
                found = document.get("order")
                if found != expected:
                    self._report_gap(expected, document)
                    expected = found if isinstance(found, int) else expected
                expected += 1
            yield document

    def _report_gap(self, expected: int, document: dict[str, Any]) -> None:
        args = (self._partition.key, expected, document.get("order"), document.get("_id"))
        if not self._strict:
            logger.warning("[partition=%s] Expected order %d, found %s on %s; serving it anyway", *args)
            return
        logger.error("[partition=%s] Expected order %d, found %s on %s", *args)
        msg = f"Order sequence of {self._partition.key} is not dense"
        raise InvariantViolationError(msg)

    async def to_list(self) -> list[dict[str, Any]]:
        return [document async for document in self]


class ChainedListing:
    """Concatenation of listings, e.g. active records then inactive ones."""

    def __init__(self, *listings: OrderedListing) -> None:
        self._listings = listings

    def __aiter__(self) -> AsyncIterator[dict[str, Any]]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[dict[str, Any]]:
        for listing in self._listings:
            async for document in listing:
                yield document

    async def to_list(self) -> list[dict[str, Any]]:
        return [document async for document in self]
