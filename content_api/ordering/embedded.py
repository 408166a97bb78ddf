"""Ordered arrays embedded in a parent document.

Season board members and highlights live inside the season document, so the
parent document is the unit of atomicity: each operation loads the parent in
a transaction, re-sorts and checks the array, applies the shift in memory and
writes the whole array back. Concurrent writers to the same parent conflict
on that single document.
"""

import logging
from collections.abc import Callable
from typing import Any

from bson import ObjectId

from content_api.mongodb.store import CollectionGateway, DocumentStore
from content_api.ordering import sequence
from content_api.ordering.errors import (
    InvariantViolationError,
    NotFoundError,
    ValidationFailure,
)
from content_api.ordering.manager import PROTECTED_FIELDS, utc_now
from content_api.ordering.sequence import ORDER_FIELD

logger = logging.getLogger(__name__)

Item = dict[str, Any]


class EmbeddedSequenceManager:
    """Dense ordering over ``parent[field]`` arrays of one collection."""

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        field: str,
        *,
        parent_entity: str,
        entity: str,
        max_items: int | None = None,
        singleton_field: str | None = None,
        prepare: Callable[[Item], None] | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            store: Transactional document store.
            collection: Collection of the parent documents.
            field: Array field holding the ordered items.
            parent_entity: Label of the parent used in errors.
            entity: Label of one item used in errors and logs.
            max_items: Optional cap on the number of siblings.
            singleton_field: Boolean field at most one sibling may hold.
            prepare: Hook applied to an item after its fields change, for
                entity-specific side effects.
        """
        self._store = store
        self._collection_name = collection
        self._field = field
        self._parent_entity = parent_entity
        self._entity = entity
        self._max_items = max_items
        self._singleton_field = singleton_field
        self._prepare = prepare

    @property
    def collection(self) -> CollectionGateway:
        return self._store.collection(self._collection_name)

    async def list_items(self, parent_id: ObjectId) -> list[Item]:
        parent = await self.collection.find_one({"_id": parent_id})
        if parent is None:
            raise NotFoundError(self._parent_entity, parent_id)
        return self._items_of(parent)

    async def get(self, parent_id: ObjectId, item_id: ObjectId) -> Item:
        items = await self.list_items(parent_id)
        return items[self._index_of(items, item_id)]

    async def append(self, parent_id: ObjectId, fields: dict[str, Any]) -> Item:
        """Add an item at the end of the parent's array."""

        async def _append(session: Any) -> Item:
            items = await self._load(parent_id, session)
            if self._max_items is not None and len(items) >= self._max_items:
                msg = f"A {self._parent_entity} can have at most {self._max_items} {self._field}"
                raise ValidationFailure(
                    msg, [{"field": self._field, "message": "limit reached"}]
                )
            item = self._clean(fields)
            item["_id"] = ObjectId()
            item[ORDER_FIELD] = len(items)
            self._apply_changes(items, item)
            items.append(item)
            await self._save(parent_id, items, session)
            return item

        created = await self._store.run_in_transaction(_append)
        logger.info(
            "[%s=%s] Added %s %s at order %d",
            self._parent_entity,
            parent_id,
            self._entity,
            created["_id"],
            created[ORDER_FIELD],
        )
        return created

    async def update(self, parent_id: ObjectId, item_id: ObjectId, fields: dict[str, Any]) -> Item:
        """Update an item's fields; ``order`` is never taken from ``fields``."""

        async def _update(session: Any) -> Item:
            items = await self._load(parent_id, session)
            item = items[self._index_of(items, item_id)]
            item.update(self._clean(fields))
            self._apply_changes(items, item)
            await self._save(parent_id, items, session)
            return item

        updated = await self._store.run_in_transaction(_update)
        logger.info("[%s=%s] Updated %s %s", self._parent_entity, parent_id, self._entity, item_id)
        return updated

    async def remove(self, parent_id: ObjectId, item_id: ObjectId) -> Item:
        """Remove an item and compact the siblings after it.

        Returns:
            The removed item, so callers can release attached assets.
        """

        async def _remove(session: Any) -> Item:
            items = await self._load(parent_id, session)
            removed = items.pop(self._index_of(items, item_id))
            sequence.removal_shift(removed[ORDER_FIELD]).apply(items)
            await self._save(parent_id, items, session)
            return removed

        removed = await self._store.run_in_transaction(_remove)
        logger.info(
            "[%s=%s] Removed %s %s from order %d",
            self._parent_entity,
            parent_id,
            self._entity,
            item_id,
            removed[ORDER_FIELD],
        )
        return removed

    async def move(self, parent_id: ObjectId, item_id: ObjectId, target: int) -> list[Item]:
        """Move an item to ``target``; returns the re-sorted array."""

        async def _move(session: Any) -> list[Item]:
            items = await self._load(parent_id, session)
            item = items[self._index_of(items, item_id)]
            shift = sequence.move_shift(item[ORDER_FIELD], target, len(items))
            if shift is None:
                return items
            shift.apply(items, skip=item_id)
            item[ORDER_FIELD] = target
            items.sort(key=lambda entry: entry[ORDER_FIELD])
            await self._save(parent_id, items, session)
            return items

        items = await self._store.run_in_transaction(_move)
        logger.info(
            "[%s=%s] Moved %s %s to order %d",
            self._parent_entity,
            parent_id,
            self._entity,
            item_id,
            target,
        )
        return items

    async def set_singleton(self, parent_id: ObjectId, item_id: ObjectId) -> list[Item]:
        """Give the singleton flag to one item and clear it on all siblings."""
        if self._singleton_field is None:
            msg = f"{self._entity} has no singleton flag"
            raise ValueError(msg)
        flag = self._singleton_field

        async def _set(session: Any) -> list[Item]:
            items = await self._load(parent_id, session)
            chosen = items[self._index_of(items, item_id)]
            chosen[flag] = True
            self._apply_changes(items, chosen)
            await self._save(parent_id, items, session)
            return items

        items = await self._store.run_in_transaction(_set)
        logger.info("[%s=%s] %s %s now holds %s", self._parent_entity, parent_id, self._entity, item_id, flag)
        return items

    async def reorder_all(self, parent_id: ObjectId, item_ids: list[ObjectId]) -> list[Item]:
        """Renumber the whole array to follow ``item_ids``."""

        async def _reorder(session: Any) -> list[Item]:
            items = await self._load(parent_id, session)
            sequence.check_permutation(item_ids, [item["_id"] for item in items])
            positions = {item_id: position for position, item_id in enumerate(item_ids)}
            for item in items:
                item[ORDER_FIELD] = positions[item["_id"]]
            items.sort(key=lambda entry: entry[ORDER_FIELD])
            await self._save(parent_id, items, session)
            return items

        return await self._store.run_in_transaction(_reorder)

    def _items_of(self, parent: dict[str, Any]) -> list[Item]:
        items = sorted(parent.get(self._field) or [], key=lambda entry: entry.get(ORDER_FIELD, 0))
        where = f"{self._parent_entity} {parent['_id']} {self._field}"
        try:
            sequence.check_density([item.get(ORDER_FIELD, 0) for item in items], where)
            if self._singleton_field is not None:
                holders = [item for item in items if item.get(self._singleton_field)]
                if len(holders) > 1:
                    msg = f"{where} has {len(holders)} items with {self._singleton_field}"
                    raise InvariantViolationError(msg)
        except InvariantViolationError as e:
            logger.error("%s", e.message)
            raise
        return items

    async def _load(self, parent_id: ObjectId, session: Any) -> list[Item]:
        parent = await self.collection.find_one({"_id": parent_id}, session=session)
        if parent is None:
            raise NotFoundError(self._parent_entity, parent_id)
        return self._items_of(parent)

    async def _save(self, parent_id: ObjectId, items: list[Item], session: Any) -> None:
        await self.collection.update_one(
            {"_id": parent_id},
            {"$set": {self._field: items, "updated_at": utc_now()}},
            session=session,
        )

    def _index_of(self, items: list[Item], item_id: ObjectId) -> int:
        for index, item in enumerate(items):
            if item["_id"] == item_id:
                return index
        raise NotFoundError(self._entity, item_id)

    @staticmethod
    def _clean(fields: dict[str, Any]) -> Item:
        return {key: value for key, value in fields.items() if key not in PROTECTED_FIELDS}

    def _apply_changes(self, items: list[Item], changed: Item) -> None:
        if self._singleton_field is not None and changed.get(self._singleton_field):
            for item in items:
                if item is not changed:
                    item[self._singleton_field] = False
        if self._prepare is not None:
            self._prepare(changed)
