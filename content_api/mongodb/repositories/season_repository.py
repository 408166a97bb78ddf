"""Repositories for seasons and their embedded board members and highlights."""

from typing import Any

from bson import ObjectId

from content_api.common.ids import parse_object_id, parse_object_ids
from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.schemas import BoardMemberDocument, HighlightDocument, SeasonDocument
from content_api.mongodb.store import DocumentStore, get_document_store
from content_api.ordering.embedded import EmbeddedSequenceManager
from content_api.ordering.errors import NotFoundError, ValidationFailure
from content_api.ordering.partition import OrderingPolicy

SEASONS_COLLECTION = "seasons"
MAX_BOARD_MEMBERS = 10
LEADER_POSITION = "Team Leader"


class SeasonRepository(OrderedRepository[SeasonDocument]):
    policy = OrderingPolicy(collection=SEASONS_COLLECTION, entity="Season", flag_field="is_active")
    document_type = SeasonDocument

    def image_handles(self, document: SeasonDocument) -> list[str]:
        handles = [document.cover_image.public_id]
        handles.extend(member.avatar.public_id for member in document.board_members)
        handles.extend(highlight.image.public_id for highlight in document.highlights)
        return [handle for handle in handles if handle]

    async def get_by_academic_year(self, academic_year: str) -> SeasonDocument:
        raw = await self._manager.collection.find_one({"academic_year": academic_year, "is_active": True})
        if raw is None:
            raise NotFoundError(self.entity, academic_year)
        return self.to_document(raw)

    async def create_record(self, fields: dict[str, Any]) -> SeasonDocument:
        existing = await self._manager.collection.find_one({"academic_year": fields.get("academic_year")})
        if existing is not None:
            msg = f"A season for {fields.get('academic_year')} already exists"
            raise ValidationFailure(msg, [{"field": "academic_year", "message": "must be unique"}])
        # Board members and highlights are managed through their own endpoints.
        fields = {key: value for key, value in fields.items() if key not in ("board_members", "highlights")}
        return await super().create_record(fields)

    async def update_record(self, record_id: str | ObjectId, fields: dict[str, Any]) -> SeasonDocument:
        fields = {key: value for key, value in fields.items() if key not in ("board_members", "highlights")}
        return await super().update_record(record_id, fields)


def _promote_leader(member: dict[str, Any]) -> None:
    if member.get("is_leader"):
        member["position"] = LEADER_POSITION


class _EmbeddedRepository:
    """Typed access to one ordered array of season documents."""

    field: str
    entity: str
    document_type: type[BoardMemberDocument] | type[HighlightDocument]

    def __init__(self, manager: EmbeddedSequenceManager) -> None:
        self._manager = manager

    def _to_item(self, raw: dict[str, Any]) -> Any:
        return self.document_type.model_validate(raw)

    def _to_items(self, raws: list[dict[str, Any]]) -> list[Any]:
        return [self._to_item(raw) for raw in raws]

    async def list_items(self, season_id: str | ObjectId) -> list[Any]:
        return self._to_items(await self._manager.list_items(parse_object_id(season_id)))

    async def get(self, season_id: str | ObjectId, item_id: str | ObjectId) -> Any:
        raw = await self._manager.get(parse_object_id(season_id), parse_object_id(item_id, f"{self.field} id"))
        return self._to_item(raw)

    async def add(self, season_id: str | ObjectId, fields: dict[str, Any]) -> Any:
        return self._to_item(await self._manager.append(parse_object_id(season_id), fields))

    async def update(self, season_id: str | ObjectId, item_id: str | ObjectId, fields: dict[str, Any]) -> Any:
        raw = await self._manager.update(
            parse_object_id(season_id), parse_object_id(item_id, f"{self.field} id"), fields
        )
        return self._to_item(raw)

    async def remove(self, season_id: str | ObjectId, item_id: str | ObjectId) -> Any:
        raw = await self._manager.remove(parse_object_id(season_id), parse_object_id(item_id, f"{self.field} id"))
        return self._to_item(raw)

    async def move(self, season_id: str | ObjectId, item_id: str | ObjectId, target: int) -> list[Any]:
        raws = await self._manager.move(
            parse_object_id(season_id), parse_object_id(item_id, f"{self.field} id"), target
        )
        return self._to_items(raws)

    async def reorder(self, season_id: str | ObjectId, item_ids: list[str]) -> list[Any]:
        raws = await self._manager.reorder_all(
            parse_object_id(season_id), parse_object_ids(item_ids, f"{self.field} ids")
        )
        return self._to_items(raws)


class BoardMemberRepository(_EmbeddedRepository):
    """Board members of a season: at most ten, at most one leader."""

    field = "board_members"
    entity = "Board member"
    document_type = BoardMemberDocument

    @classmethod
    def create(cls, store: DocumentStore | None = None) -> "BoardMemberRepository":
        manager = EmbeddedSequenceManager(
            store or get_document_store(),
            SEASONS_COLLECTION,
            cls.field,
            parent_entity="Season",
            entity=cls.entity,
            max_items=MAX_BOARD_MEMBERS,
            singleton_field="is_leader",
            prepare=_promote_leader,
        )
        return cls(manager)

    async def set_leader(self, season_id: str | ObjectId, member_id: str | ObjectId) -> list[BoardMemberDocument]:
        raws = await self._manager.set_singleton(
            parse_object_id(season_id), parse_object_id(member_id, "board_members id")
        )
        return self._to_items(raws)


class HighlightRepository(_EmbeddedRepository):
    field = "highlights"
    entity = "Highlight"
    document_type = HighlightDocument

    @classmethod
    def create(cls, store: DocumentStore | None = None) -> "HighlightRepository":
        manager = EmbeddedSequenceManager(
            store or get_document_store(),
            SEASONS_COLLECTION,
            cls.field,
            parent_entity="Season",
            entity=cls.entity,
        )
        return cls(manager)

