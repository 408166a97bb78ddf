"""Tests for OrderedCollectionManager."""

import asyncio
import random

import pytest
from bson import ObjectId

from content_api.ordering.errors import (
    InvalidTargetError,
    InvariantViolationError,
    NotFoundError,
    StoreFailure,
)
from content_api.ordering.manager import LOCK_COLLECTION, OrderedCollectionManager
from content_api.ordering.partition import OrderingPolicy
from content_api.ordering.sequence import UNORDERED

from tests.memory_store import MemoryDocumentStore

EVENTS = OrderingPolicy(collection="events", entity="Event", flag_field="active")
SPONSORS = OrderingPolicy(collection="sponsors", entity="Sponsor", flag_field="active", scope_fields=("type",))
HERO = OrderingPolicy(collection="hero_contents", entity="Hero content")


@pytest.fixture()
def events(store: MemoryDocumentStore) -> OrderedCollectionManager:
    return OrderedCollectionManager(store, EVENTS)


async def _create(manager: OrderedCollectionManager, count: int, **fields) -> list[ObjectId]:
    ids = []
    for index in range(count):
        created = await manager.append({"title": f"item {index}", **fields})
        ids.append(created["_id"])
    return ids


async def _active_ids(manager: OrderedCollectionManager, scope: dict | None = None) -> list[ObjectId]:
    return [document["_id"] for document in await manager.list_active(scope).to_list()]


async def _inactive_ids(manager: OrderedCollectionManager) -> list[ObjectId]:
    return [document["_id"] for document in await manager.list_inactive().to_list()]


def _assert_dense(store: MemoryDocumentStore, collection: str, query: dict) -> None:
    orders = store.orders(collection, query)
    assert orders == list(range(len(orders)))


class TestAppend:
    @pytest.mark.asyncio
    async def test_append_assigns_next_order(self, events: OrderedCollectionManager) -> None:
        await _create(events, 3)
        created = await events.append({"title": "fourth"})
        assert created["order"] == 3
        assert created["active"] is True

    @pytest.mark.asyncio
    async def test_client_order_and_timestamps_are_ignored(self, events: OrderedCollectionManager) -> None:
        created = await events.append({"title": "first", "order": 42, "created_at": "yesterday"})
        assert created["order"] == 0
        assert created["created_at"] != "yesterday"

    @pytest.mark.asyncio
    async def test_inactive_record_gets_sentinel_order(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        await _create(events, 2)
        created = await events.append({"title": "hidden", "active": False})
        assert created["order"] == UNORDERED
        _assert_dense(store, "events", {"active": True})

    @pytest.mark.asyncio
    async def test_append_bumps_partition_lock(self, store: MemoryDocumentStore, events: OrderedCollectionManager) -> None:
        await _create(events, 2)
        locks = store.raw(LOCK_COLLECTION)
        assert locks == [{"_id": "events:ordered", "version": 2}]

    @pytest.mark.asyncio
    async def test_scopes_are_numbered_independently(self, store: MemoryDocumentStore) -> None:
        sponsors = OrderedCollectionManager(store, SPONSORS)
        first_sponsor = await sponsors.append({"name": "a", "type": "sponsor"})
        first_partner = await sponsors.append({"name": "b", "type": "partner"})
        second_sponsor = await sponsors.append({"name": "c", "type": "sponsor"})
        assert (first_sponsor["order"], first_partner["order"], second_sponsor["order"]) == (0, 0, 1)


class TestCompactDelete:
    @pytest.mark.asyncio
    async def test_delete_middle_record_closes_gap(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        first, middle, last = await _create(events, 3)
        deleted = await events.compact_delete(middle)
        assert deleted["_id"] == middle
        remaining = await events.list_active().to_list()
        assert [(document["_id"], document["order"]) for document in remaining] == [(first, 0), (last, 1)]

    @pytest.mark.asyncio
    async def test_delete_shifts_only_higher_orders(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 6)
        before = {document["_id"]: document["order"] for document in await events.list_active().to_list()}
        await events.compact_delete(ids[2])
        after = {document["_id"]: document["order"] for document in await events.list_active().to_list()}
        for record_id, order in after.items():
            assert order == (before[record_id] - 1 if before[record_id] > 2 else before[record_id])

    @pytest.mark.asyncio
    async def test_delete_inactive_record_leaves_active_untouched(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        active = await _create(events, 3)
        hidden = await events.append({"title": "hidden", "active": False})
        await events.compact_delete(hidden["_id"])
        assert await _active_ids(events) == active

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_not_found(self, events: OrderedCollectionManager) -> None:
        with pytest.raises(NotFoundError):
            await events.compact_delete(ObjectId())

    @pytest.mark.asyncio
    async def test_concurrent_deletes_keep_partition_dense(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 8)
        await asyncio.gather(events.compact_delete(ids[1]), events.compact_delete(ids[5]))
        _assert_dense(store, "events", {"active": True})
        assert await _active_ids(events) == [ids[0], ids[2], ids[3], ids[4], ids[6], ids[7]]


class TestMove:
    @pytest.mark.asyncio
    async def test_move_last_to_first(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 4)
        moved = await events.move(ids[3], 0)
        assert moved["order"] == 0
        assert await _active_ids(events) == [ids[3], ids[0], ids[1], ids[2]]

    @pytest.mark.asyncio
    async def test_move_first_to_middle(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 4)
        await events.move(ids[0], 2)
        assert await _active_ids(events) == [ids[1], ids[2], ids[0], ids[3]]

    @pytest.mark.asyncio
    async def test_move_to_current_order_is_noop(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 3)
        before = store.raw("events")
        await events.move(ids[1], 1)
        assert store.raw("events") == before

    @pytest.mark.asyncio
    async def test_move_round_trip_restores_ordering(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 5)
        await events.move(ids[1], 4)
        await events.move(ids[1], 1)
        assert await _active_ids(events) == ids

    @pytest.mark.asyncio
    @pytest.mark.parametrize("target", [-1, 3, 10])
    async def test_move_out_of_range_is_invalid(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager, target: int
    ) -> None:
        ids = await _create(events, 3)
        before = store.raw("events")
        with pytest.raises(InvalidTargetError):
            await events.move(ids[0], target)
        assert store.raw("events") == before

    @pytest.mark.asyncio
    async def test_move_inactive_record_is_invalid(self, events: OrderedCollectionManager) -> None:
        await _create(events, 2)
        hidden = await events.append({"title": "hidden", "active": False})
        with pytest.raises(InvalidTargetError):
            await events.move(hidden["_id"], 0)


class TestToggle:
    @pytest.mark.asyncio
    async def test_deactivate_compacts_and_lists_by_recency(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 3)
        older = await events.append({"title": "old hidden", "active": False})
        toggled = await events.toggle(ids[1])
        assert toggled["active"] is False
        assert toggled["order"] == UNORDERED

        active = await events.list_active().to_list()
        assert [(document["_id"], document["order"]) for document in active] == [(ids[0], 0), (ids[2], 1)]
        inactive = await _inactive_ids(events)
        assert inactive == [ids[1], older["_id"]]

    @pytest.mark.asyncio
    async def test_reactivate_appends_at_end(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 3)
        await events.toggle(ids[1])
        reactivated = await events.toggle(ids[1])
        assert reactivated["active"] is True
        assert reactivated["order"] == 2
        assert await _active_ids(events) == [ids[0], ids[2], ids[1]]

    @pytest.mark.asyncio
    async def test_toggle_without_flag_is_invalid(self, store: MemoryDocumentStore) -> None:
        hero = OrderedCollectionManager(store, HERO)
        created = await hero.append({"heading": "x"})
        with pytest.raises(InvalidTargetError):
            await hero.toggle(created["_id"])

    @pytest.mark.asyncio
    async def test_admin_listing_is_active_then_inactive(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 3)
        await events.toggle(ids[0])
        listing = await events.list_admin().to_list()
        assert [document["_id"] for document in listing] == [ids[1], ids[2], ids[0]]

class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_plain_fields_keeps_order(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 3)
        updated = await events.update(ids[2], {"title": "renamed", "order": 0})
        assert updated["title"] == "renamed"
        assert updated["order"] == 2

    @pytest.mark.asyncio
    async def test_scope_change_transfers_between_partitions(self, store: MemoryDocumentStore) -> None:
        sponsors = OrderedCollectionManager(store, SPONSORS)
        a = await sponsors.append({"name": "a", "type": "sponsor"})
        b = await sponsors.append({"name": "b", "type": "sponsor"})
        await sponsors.append({"name": "p", "type": "partner"})

        moved = await sponsors.update(a["_id"], {"type": "partner", "name": "a2"})
        assert moved["type"] == "partner"
        assert moved["name"] == "a2"
        assert moved["order"] == 1
        remaining = await sponsors.list_active({"type": "sponsor"}).to_list()
        assert [(document["_id"], document["order"]) for document in remaining] == [(b["_id"], 0)]

    @pytest.mark.asyncio
    async def test_deactivating_through_update_compacts(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 3)
        updated = await events.update(ids[0], {"active": False})
        assert updated["order"] == UNORDERED
        _assert_dense(store, "events", {"active": True})

    @pytest.mark.asyncio
    async def test_transfer_rejects_non_partition_fields(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 1)
        with pytest.raises(ValueError):
            await events.transfer_partition(ids[0], {"title": "nope"})


class TestReorderAll:
    @pytest.mark.asyncio
    async def test_reorder_follows_given_ids(self, events: OrderedCollectionManager) -> None:
        ids = await _create(events, 4)
        wanted = [ids[2], ids[0], ids[3], ids[1]]
        reordered = await events.reorder_all(wanted)
        assert [document["_id"] for document in reordered] == wanted
        assert [document["order"] for document in reordered] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_reorder_must_be_permutation(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 3)
        before = store.raw("events")
        with pytest.raises(InvalidTargetError):
            await events.reorder_all(ids[:2])
        with pytest.raises(InvalidTargetError):
            await events.reorder_all([ids[0], ids[0], ids[1]])
        assert store.raw("events") == before


class TestAtomicity:
    @pytest.mark.asyncio
    async def test_store_failure_leaves_no_partial_mutation(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 3)
        before = store.raw("events")
        store.fail_writes = StoreFailure("connection lost")
        with pytest.raises(StoreFailure):
            await events.compact_delete(ids[0])
        store.fail_writes = None
        assert store.raw("events") == before

    @pytest.mark.asyncio
    async def test_corrupt_partition_is_reported_not_corrected(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 3)
        store.data["events"][ids[2]]["order"] = 5
        with pytest.raises(InvariantViolationError):
            await events.list_active().to_list()
        with pytest.raises(InvariantViolationError):
            await events.append({"title": "another"})
        assert store.orders("events", {"active": True}) == [0, 1, 5]


def _lock_versions(store: MemoryDocumentStore) -> dict[str, int]:
    return {lock["_id"]: lock["version"] for lock in store.raw(LOCK_COLLECTION)}


class TestPartitionLocks:
    """Every mutation writes the lock document of each ordered partition it
    touches, so MongoDB reports a write conflict for overlapping transactions."""

    @pytest.mark.asyncio
    async def test_delete_move_toggle_and_reorder_bump_the_lock(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 3)
        assert _lock_versions(store) == {"events:ordered": 3}

        await events.compact_delete(ids[0])
        assert _lock_versions(store) == {"events:ordered": 4}

        await events.move(ids[2], 0)
        assert _lock_versions(store) == {"events:ordered": 5}

        await events.toggle(ids[1])
        assert _lock_versions(store) == {"events:ordered": 6}

        await events.toggle(ids[1])
        assert _lock_versions(store) == {"events:ordered": 7}

        await events.reorder_all([ids[1], ids[2]])
        assert _lock_versions(store) == {"events:ordered": 8}

    @pytest.mark.asyncio
    async def test_noop_move_still_takes_the_lock(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 2)
        await events.move(ids[1], 1)
        assert _lock_versions(store) == {"events:ordered": 3}

    @pytest.mark.asyncio
    async def test_transfer_locks_source_and_destination_only(self, store: MemoryDocumentStore) -> None:
        sponsors = OrderedCollectionManager(store, SPONSORS)
        moving = await sponsors.append({"name": "Acme", "type": "sponsor"})
        await sponsors.append({"name": "Globex", "type": "partner"})
        await sponsors.append({"name": "Initech", "type": "partner"})
        await OrderedCollectionManager(store, EVENTS).append({"title": "unrelated"})

        await sponsors.update(moving["_id"], {"type": "partner"})
        assert _lock_versions(store) == {
            "sponsors:type=sponsor:ordered": 2,
            "sponsors:type=partner:ordered": 3,
            "events:ordered": 1,
        }

    @pytest.mark.asyncio
    async def test_deleting_inactive_record_takes_no_lock(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        await _create(events, 1)
        hidden = await events.append({"title": "hidden", "active": False})
        await events.compact_delete(hidden["_id"])
        assert _lock_versions(store) == {"events:ordered": 1}


class TestDropScope:
    @pytest.mark.asyncio
    async def test_drop_scope_removes_every_record_of_the_scope(self, store: MemoryDocumentStore) -> None:
        sponsors = OrderedCollectionManager(store, SPONSORS)
        await sponsors.append({"name": "Acme", "type": "sponsor"})
        await sponsors.append({"name": "Hooli", "type": "sponsor", "active": False})
        partner = await sponsors.append({"name": "Globex", "type": "partner"})

        dropped = await store.run_in_transaction(lambda session: sponsors.drop_scope({"type": "sponsor"}, session))

        assert sorted(document["name"] for document in dropped) == ["Acme", "Hooli"]
        assert [document["_id"] for document in store.raw("sponsors")] == [partner["_id"]]
        assert _lock_versions(store)["sponsors:type=sponsor:ordered"] == 2

    @pytest.mark.asyncio
    async def test_failing_cascade_rolls_back_the_delete(
        self, store: MemoryDocumentStore, events: OrderedCollectionManager
    ) -> None:
        ids = await _create(events, 2)

        async def _cascade(deleted: dict, session: object) -> None:
            raise StoreFailure("dependent records could not be removed")

        with pytest.raises(StoreFailure):
            await events.compact_delete(ids[0], cascade=_cascade)
        assert await _active_ids(events) == ids
        assert _lock_versions(store) == {"events:ordered": 2}


class TestRandomizedDensity:
    @pytest.mark.asyncio
    async def test_density_holds_after_random_operations(self, store: MemoryDocumentStore) -> None:
        rng = random.Random(7)
        sponsors = OrderedCollectionManager(store, SPONSORS)
        for index in range(12):
            await sponsors.append({"name": f"s{index}", "type": rng.choice(["sponsor", "partner"])})

        for _ in range(60):
            documents = store.raw("sponsors")
            if not documents:
                break
            target = rng.choice(documents)
            operation = rng.choice(["delete", "move", "toggle", "retype", "create"])
            if operation == "delete":
                await sponsors.compact_delete(target["_id"])
            elif operation == "move" and target["active"]:
                size = len(store.orders("sponsors", {"type": target["type"], "active": True}))
                await sponsors.move(target["_id"], rng.randrange(size))
            elif operation == "toggle":
                await sponsors.toggle(target["_id"])
            elif operation == "retype":
                await sponsors.update(target["_id"], {"type": rng.choice(["sponsor", "partner"])})
            else:
                await sponsors.append({"name": "new", "type": rng.choice(["sponsor", "partner"])})

            for sponsor_type in ("sponsor", "partner"):
                _assert_dense(store, "sponsors", {"type": sponsor_type, "active": True})
            assert all(
                document["order"] == UNORDERED for document in store.raw("sponsors") if not document["active"]
            )
