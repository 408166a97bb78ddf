"""Tests for ordered arrays embedded in season documents."""

import asyncio

import pytest
import pytest_asyncio
from bson import ObjectId

from content_api.mongodb.repositories import BoardMemberRepository, HighlightRepository, SeasonRepository
from content_api.mongodb.repositories.season_repository import LEADER_POSITION, MAX_BOARD_MEMBERS
from content_api.ordering.errors import (
    InvalidTargetError,
    InvariantViolationError,
    NotFoundError,
    StoreFailure,
    ValidationFailure,
)

from tests.memory_store import MemoryDocumentStore


@pytest_asyncio.fixture()
async def season_id(store: MemoryDocumentStore) -> ObjectId:
    season = await SeasonRepository(store).create_record({"academic_year": "2024-2025", "theme": "Build"})
    return season.id


@pytest.fixture()
def members(store: MemoryDocumentStore) -> BoardMemberRepository:
    return BoardMemberRepository.create(store)


@pytest.fixture()
def highlights(store: MemoryDocumentStore) -> HighlightRepository:
    return HighlightRepository.create(store)


async def _add_members(members: BoardMemberRepository, season_id: ObjectId, count: int) -> list[ObjectId]:
    ids = []
    for index in range(count):
        member = await members.add(season_id, {"name": f"member {index}", "position": "Member"})
        ids.append(member.id)
    return ids


def _stored_members(store: MemoryDocumentStore, season_id: ObjectId) -> list[dict]:
    return store.data["seasons"][season_id]["board_members"]


class TestBoardMembers:
    @pytest.mark.asyncio
    async def test_add_appends_in_order(self, members: BoardMemberRepository, season_id: ObjectId) -> None:
        ids = await _add_members(members, season_id, 3)
        listed = await members.list_items(season_id)
        assert [member.id for member in listed] == ids
        assert [member.order for member in listed] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_cap_rejects_eleventh_member(
        self, store: MemoryDocumentStore, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        await _add_members(members, season_id, MAX_BOARD_MEMBERS)
        with pytest.raises(ValidationFailure):
            await members.add(season_id, {"name": "one too many"})
        assert len(_stored_members(store, season_id)) == MAX_BOARD_MEMBERS

    @pytest.mark.asyncio
    async def test_remove_compacts_following_members(
        self, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        ids = await _add_members(members, season_id, 4)
        removed = await members.remove(season_id, ids[1])
        assert removed.id == ids[1]
        listed = await members.list_items(season_id)
        assert [(member.id, member.order) for member in listed] == [(ids[0], 0), (ids[2], 1), (ids[3], 2)]

    @pytest.mark.asyncio
    async def test_move_shifts_siblings(self, members: BoardMemberRepository, season_id: ObjectId) -> None:
        ids = await _add_members(members, season_id, 4)
        moved = await members.move(season_id, ids[0], 3)
        assert [member.id for member in moved] == [ids[1], ids[2], ids[3], ids[0]]
        assert [member.order for member in moved] == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_move_out_of_range_is_invalid(self, members: BoardMemberRepository, season_id: ObjectId) -> None:
        ids = await _add_members(members, season_id, 2)
        with pytest.raises(InvalidTargetError):
            await members.move(season_id, ids[0], 2)

    @pytest.mark.asyncio
    async def test_set_leader_keeps_single_leader(
        self, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        ids = await _add_members(members, season_id, 3)
        await members.set_leader(season_id, ids[0])
        updated = await members.set_leader(season_id, ids[1])

        assert [member.is_leader for member in updated] == [False, True, False]
        assert updated[1].position == LEADER_POSITION
        assert [member.order for member in updated] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_adding_a_leader_replaces_previous_one(
        self, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        first = await members.add(season_id, {"name": "first", "is_leader": True})
        second = await members.add(season_id, {"name": "second", "is_leader": True})
        listed = await members.list_items(season_id)
        assert [(member.id, member.is_leader) for member in listed] == [(first.id, False), (second.id, True)]
        assert second.position == LEADER_POSITION

    @pytest.mark.asyncio
    async def test_update_ignores_order(self, members: BoardMemberRepository, season_id: ObjectId) -> None:
        ids = await _add_members(members, season_id, 2)
        updated = await members.update(season_id, ids[0], {"name": "renamed", "order": 1})
        assert updated.name == "renamed"
        assert updated.order == 0

    @pytest.mark.asyncio
    async def test_reorder_batch(self, members: BoardMemberRepository, season_id: ObjectId) -> None:
        ids = await _add_members(members, season_id, 3)
        reordered = await members.reorder(season_id, [str(ids[2]), str(ids[0]), str(ids[1])])
        assert [member.id for member in reordered] == [ids[2], ids[0], ids[1]]

    @pytest.mark.asyncio
    async def test_unknown_member_or_season(self, members: BoardMemberRepository, season_id: ObjectId) -> None:
        with pytest.raises(NotFoundError):
            await members.get(season_id, ObjectId())
        with pytest.raises(NotFoundError):
            await members.list_items(ObjectId())

    @pytest.mark.asyncio
    async def test_concurrent_adds_keep_array_dense(
        self, store: MemoryDocumentStore, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        await asyncio.gather(
            *(members.add(season_id, {"name": f"m{index}", "position": "Member"}) for index in range(5))
        )
        orders = sorted(member["order"] for member in _stored_members(store, season_id))
        assert orders == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_failed_write_leaves_array_untouched(
        self, store: MemoryDocumentStore, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        ids = await _add_members(members, season_id, 3)
        before = store.raw("seasons")
        store.fail_writes = StoreFailure("connection lost")
        with pytest.raises(StoreFailure):
            await members.remove(season_id, ids[0])
        store.fail_writes = None
        assert store.raw("seasons") == before

    @pytest.mark.asyncio
    async def test_two_leaders_in_storage_is_reported(
        self, store: MemoryDocumentStore, members: BoardMemberRepository, season_id: ObjectId
    ) -> None:
        await _add_members(members, season_id, 2)
        for member in _stored_members(store, season_id):
            member["is_leader"] = True
        with pytest.raises(InvariantViolationError):
            await members.list_items(season_id)


class TestHighlights:
    @pytest.mark.asyncio
    async def test_highlights_are_independent_of_board_members(
        self,
        members: BoardMemberRepository,
        highlights: HighlightRepository,
        season_id: ObjectId,
    ) -> None:
        await _add_members(members, season_id, 2)
        first = await highlights.add(season_id, {"title": "Launch"})
        second = await highlights.add(season_id, {"title": "Demo day"})
        assert (first.order, second.order) == (0, 1)

        await highlights.remove(season_id, first.id)
        remaining = await highlights.list_items(season_id)
        assert [(highlight.id, highlight.order) for highlight in remaining] == [(second.id, 0)]
        assert len(await members.list_items(season_id)) == 2

    @pytest.mark.asyncio
    async def test_highlights_have_no_cap(self, highlights: HighlightRepository, season_id: ObjectId) -> None:
        for index in range(MAX_BOARD_MEMBERS + 2):
            await highlights.add(season_id, {"title": f"h{index}"})
        assert len(await highlights.list_items(season_id)) == MAX_BOARD_MEMBERS + 2
