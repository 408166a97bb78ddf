"""Ordered collection manager for top-level collections.

Keeps ``order`` dense within every partition of a collection while records
are created, updated, deleted, moved and (de)activated. Each mutation runs as
one store transaction which first bumps the lock document of every ordered
partition it touches, so two operations on the same partition always
conflict and one of them is retried against the other's result.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from bson import ObjectId

from content_api.mongodb.store import ORDER_ASC, ORDER_DESC, CollectionGateway, DocumentStore
from content_api.ordering import sequence
from content_api.ordering.errors import InvalidTargetError, InvariantViolationError, NotFoundError
from content_api.ordering.listing import ChainedListing, OrderedListing
from content_api.ordering.partition import OrderingPolicy, Partition
from content_api.ordering.sequence import ORDER_FIELD, UNORDERED

logger = logging.getLogger(__name__)

LOCK_COLLECTION = "ordering_locks"

# Never written through update payloads.
PROTECTED_FIELDS = frozenset({"_id", "id", ORDER_FIELD, "created_at", "updated_at"})

Cascade = Callable[[dict[str, Any], Any], Awaitable[None]]


def utc_now() -> datetime:
    return datetime.now(UTC)


class OrderedCollectionManager:
    """Dense ordering over one collection, partitioned by an :class:`OrderingPolicy`."""

    def __init__(self, store: DocumentStore, policy: OrderingPolicy) -> None:
        self._store = store
        self._policy = policy

    @property
    def policy(self) -> OrderingPolicy:
        return self._policy

    @property
    def collection(self) -> CollectionGateway:
        return self._store.collection(self._policy.collection)

    async def get(self, record_id: ObjectId) -> dict[str, Any]:
        document = await self.collection.find_one({"_id": record_id})
        if document is None:
            raise NotFoundError(self._policy.entity, record_id)
        return document

    def listing(self, partition: Partition, *, strict: bool = True) -> OrderedListing:
        """Lazy listing of one partition; see :class:`OrderedListing` for ``strict``."""
        return OrderedListing(self.collection, partition, strict=strict)

    def list_active(self, scope: dict[str, Any] | None = None, *, strict: bool = True) -> OrderedListing:
        return self.listing(self._policy.ordered_partition(scope), strict=strict)

    def list_inactive(self, scope: dict[str, Any] | None = None) -> OrderedListing:
        return self.listing(self._policy.recency_partition(scope))

    def list_admin(self, scope: dict[str, Any] | None = None) -> ChainedListing:
        """Active records by order, then inactive ones by recency."""
        if self._policy.flag_field is None:
            return ChainedListing(self.list_active(scope))
        return ChainedListing(self.list_active(scope), self.list_inactive(scope))

    async def append(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Insert a record at the end of its partition.

        Args:
            fields: Record fields; any client supplied ``order`` is ignored.

        Returns:
            The stored record, including ``_id`` and ``order``.
        """

        async def _append(session: Any) -> dict[str, Any]:
            now = utc_now()
            document = {
                key: value for key, value in fields.items() if key not in PROTECTED_FIELDS
            }
            if self._policy.flag_field is not None:
                document.setdefault(self._policy.flag_field, self._policy.flag_default)
            document["created_at"] = now
            document["updated_at"] = now

            partition = self._policy.partition_of(document)
            if partition.ordered:
                await self._lock(partition, session)
                document[ORDER_FIELD] = await self._next_order(partition, session)
            else:
                document[ORDER_FIELD] = UNORDERED

            document["_id"] = await self.collection.insert_one(document, session=session)
            await self._verify(partition, session)
            return document

        created = await self._store.run_in_transaction(_append)
        logger.info(
            "[%s=%s] Created at order %d",
            self._policy.entity,
            created["_id"],
            created[ORDER_FIELD],
        )
        return created

    async def update(self, record_id: ObjectId, fields: dict[str, Any]) -> dict[str, Any]:
        """Update plain fields; partition field changes become a transfer.

        ``order`` and the other protected fields are never taken from ``fields``.
        """
        async def _update(session: Any) -> dict[str, Any]:
            changes = {
                key: value for key, value in fields.items() if key not in PROTECTED_FIELDS
            }
            current = await self._load(record_id, session)
            moved = {
                name: changes.pop(name)
                for name in self._policy.partition_fields
                if name in changes and changes[name] != current.get(name)
            }
            for name in self._policy.partition_fields:
                changes.pop(name, None)

            if moved:
                await self._transfer(current, moved, changes, session)
            else:
                await self.collection.update_one(
                    {"_id": record_id},
                    {"$set": {**changes, "updated_at": utc_now()}},
                    session=session,
                )
            return await self._load(record_id, session)

        updated = await self._store.run_in_transaction(_update)
        logger.info("[%s=%s] Updated fields", self._policy.entity, record_id)
        return updated

    async def compact_delete(
        self,
        record_id: ObjectId,
        *,
        cascade: Cascade | None = None,
    ) -> dict[str, Any]:
        """Delete a record and close the gap it leaves in its partition.

        Args:
            record_id: Record to delete.
            cascade: Called with the deleted record and the session, inside
                the same transaction, to remove records that depend on it.

        Returns:
            The deleted record, so callers can release attached assets.
        """

        async def _delete(session: Any) -> dict[str, Any]:
            current = await self._load(record_id, session)
            partition = self._policy.partition_of(current)
            if partition.ordered:
                await self._lock(partition, session)
            await self.collection.delete_one({"_id": record_id}, session=session)
            if partition.ordered:
                await self._close_gap(partition, current[ORDER_FIELD], session)
                await self._verify(partition, session)
            if cascade is not None:
                await cascade(current, session)
            return current

        deleted = await self._store.run_in_transaction(_delete)
        logger.info(
            "[%s=%s] Deleted from order %d",
            self._policy.entity,
            record_id,
            deleted[ORDER_FIELD],
        )
        return deleted

    async def move(self, record_id: ObjectId, target: int) -> dict[str, Any]:
        """Move a record to ``target`` within its ordered partition.

        Raises:
            InvalidTargetError: If ``target`` is outside ``[0, n-1]`` or the
                record is not in an ordered partition.
        """

        async def _move(session: Any) -> dict[str, Any]:
            current = await self._load(record_id, session)
            partition = self._policy.partition_of(current)
            if not partition.ordered:
                msg = f"Inactive {self._policy.entity} cannot be reordered"
                raise InvalidTargetError(msg)

            await self._lock(partition, session)
            size = await self.collection.count(partition.query, session=session)
            shift = sequence.move_shift(current[ORDER_FIELD], target, size)
            if shift is None:
                return current

            await self.collection.update_many(
                {**partition.query, **shift.query(), "_id": {"$ne": record_id}},
                {"$inc": {ORDER_FIELD: shift.delta}},
                session=session,
            )
            await self.collection.update_one(
                {"_id": record_id},
                {"$set": {ORDER_FIELD: target, "updated_at": utc_now()}},
                session=session,
            )
            await self._verify(partition, session)
            return await self._load(record_id, session)

        moved = await self._store.run_in_transaction(_move)
        logger.info("[%s=%s] Moved to order %d", self._policy.entity, record_id, target)
        return moved

    async def transfer_partition(
        self,
        record_id: ObjectId,
        changes: dict[str, Any],
    ) -> dict[str, Any]:
        """Move a record into the partition described by ``changes``.

        The old ordered partition is compacted; an ordered destination
        appends the record at its end, a recency destination gives it the
        ``-1`` sentinel.
        """
        unknown = set(changes) - set(self._policy.partition_fields)
        if unknown:
            msg = f"Not partition fields of {self._policy.entity}: {sorted(unknown)}"
            raise ValueError(msg)

        async def _transfer(session: Any) -> dict[str, Any]:
            current = await self._load(record_id, session)
            await self._transfer(current, changes, {}, session)
            return await self._load(record_id, session)

        transferred = await self._store.run_in_transaction(_transfer)
        logger.info(
            "[%s=%s] Transferred to %s at order %d",
            self._policy.entity,
            record_id,
            changes,
            transferred[ORDER_FIELD],
        )
        return transferred

    async def toggle(self, record_id: ObjectId) -> dict[str, Any]:
        """Flip the activation flag (deactivate compacts, activate appends)."""
        flag = self._policy.flag_field
        if flag is None:
            msg = f"{self._policy.entity} has no activation flag"
            raise InvalidTargetError(msg)

        async def _toggle(session: Any) -> dict[str, Any]:
            current = await self._load(record_id, session)
            await self._transfer(current, {flag: not self._policy.is_active(current)}, {}, session)
            return await self._load(record_id, session)

        toggled = await self._store.run_in_transaction(_toggle)
        logger.info(
            "[%s=%s] %s=%s, order %d",
            self._policy.entity,
            record_id,
            flag,
            toggled[flag],
            toggled[ORDER_FIELD],
        )
        return toggled

    async def reorder_all(
        self,
        record_ids: list[ObjectId],
        scope: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """Renumber a whole ordered partition to follow ``record_ids``."""
        partition = self._policy.ordered_partition(scope)

        async def _reorder(session: Any) -> list[dict[str, Any]]:
            await self._lock(partition, session)
            existing = [
                document["_id"]
                async for document in self.collection.find(
                    partition.query, sort=ORDER_ASC, session=session
                )
            ]
            sequence.check_permutation(record_ids, existing)
            now = utc_now()
            for position, record_id in enumerate(record_ids):
                await self.collection.update_one(
                    {"_id": record_id},
                    {"$set": {ORDER_FIELD: position, "updated_at": now}},
                    session=session,
                )
            await self._verify(partition, session)
            return [
                document
                async for document in self.collection.find(
                    partition.query, sort=ORDER_ASC, session=session
                )
            ]

        reordered = await self._store.run_in_transaction(_reorder)
        logger.info("[partition=%s] Renumbered %d records", partition.key, len(reordered))
        return reordered

    async def drop_scope(self, scope: dict[str, Any], session: Any) -> list[dict[str, Any]]:
        """Delete every record of ``scope`` inside the caller's transaction.

        The scope's partitions disappear as a whole, so nothing is compacted.

        Returns:
            The deleted records.
        """
        await self._lock(self._policy.ordered_partition(scope), session)
        query = {name: scope[name] for name in self._policy.scope_fields}
        dropped = [document async for document in self.collection.find(query, session=session)]
        await self.collection.delete_many(query, session=session)
        return dropped

    async def _load(self, record_id: ObjectId, session: Any) -> dict[str, Any]:
        document = await self.collection.find_one({"_id": record_id}, session=session)
        if document is None:
            raise NotFoundError(self._policy.entity, record_id)
        return document

    async def _lock(self, partition: Partition, session: Any) -> None:
        await self._store.collection(LOCK_COLLECTION).update_one(
            {"_id": partition.key},
            {"$inc": {"version": 1}},
            upsert=True,
            session=session,
        )

    async def _next_order(self, partition: Partition, session: Any) -> int:
        last = await self.collection.find_one(partition.query, sort=ORDER_DESC, session=session)
        return 0 if last is None else last[ORDER_FIELD] + 1

    async def _close_gap(self, partition: Partition, order: int, session: Any) -> None:
        shift = sequence.removal_shift(order)
        await self.collection.update_many(
            {**partition.query, **shift.query()},
            {"$inc": {ORDER_FIELD: shift.delta}},
            session=session,
        )

    async def _verify(self, partition: Partition, session: Any) -> None:
        if not partition.ordered:
            return
        orders = [
            document[ORDER_FIELD]
            async for document in self.collection.find(partition.query, session=session)
        ]
        try:
            sequence.check_density(orders, partition.key)
        except InvariantViolationError:
            logger.error("[partition=%s] Density check failed: %s", partition.key, sorted(orders))
            raise

    async def _transfer(
        self,
        current: dict[str, Any],
        moved: dict[str, Any],
        extra: dict[str, Any],
        session: Any,
    ) -> None:
        record_id = current["_id"]
        source = self._policy.partition_of(current)
        destination = self._policy.partition_of({**current, **moved})

        if source.ordered:
            await self._lock(source, session)
        if destination.ordered and destination.key != source.key:
            await self._lock(destination, session)

        if destination.key == source.key:
            order = current[ORDER_FIELD]
        elif destination.ordered:
            order = await self._next_order(destination, session)
        else:
            order = UNORDERED

        await self.collection.update_one(
            {"_id": record_id},
            {"$set": {**extra, **moved, ORDER_FIELD: order, "updated_at": utc_now()}},
            session=session,
        )
        if source.ordered and destination.key != source.key:
            await self._close_gap(source, current[ORDER_FIELD], session)
            await self._verify(source, session)
        await self._verify(destination, session)
