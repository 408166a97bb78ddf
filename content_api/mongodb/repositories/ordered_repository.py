"""Base repository for ordered content collections."""

from typing import Any, ClassVar, Generic, TypeVar

from bson import ObjectId

from content_api.common.ids import parse_object_id, parse_object_ids
from content_api.mongodb.schemas import OrderedDocument
from content_api.mongodb.store import DocumentStore, get_document_store
from content_api.ordering.errors import ValidationFailure
from content_api.ordering.manager import OrderedCollectionManager
from content_api.ordering.partition import OrderingPolicy

DocT = TypeVar("DocT", bound=OrderedDocument)


class OrderedRepository(Generic[DocT]):
    """Typed access to one ordered collection.

    Subclasses name their :class:`OrderingPolicy` and document type; every
    write goes through :class:`OrderedCollectionManager` so the collection's
    ``order`` sequences stay dense.
    """

    policy: ClassVar[OrderingPolicy]
    document_type: ClassVar[type[OrderedDocument]]

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._manager = OrderedCollectionManager(store, self.policy)

    @classmethod
    def create(cls, store: DocumentStore | None = None) -> "OrderedRepository[DocT]":
        """Create a repository instance with the default store."""
        return cls(store or get_document_store())

    @property
    def entity(self) -> str:
        return self.policy.entity

    @property
    def manager(self) -> OrderedCollectionManager:
        return self._manager

    def to_document(self, raw: dict[str, Any]) -> DocT:
        return self.document_type.model_validate(raw)  # type: ignore[return-value]

    def to_documents(self, raws: list[dict[str, Any]]) -> list[DocT]:
        return [self.to_document(raw) for raw in raws]

    def scope_of(self, document: DocT) -> dict[str, Any]:
        """Scope values of the partition ``document`` lives in."""
        return {name: getattr(document, name) for name in self.policy.scope_fields}

    def image_handles(self, document: DocT) -> list[str]:
        """Image store handles owned by ``document``, released on delete."""
        return []

    async def get(self, record_id: str | ObjectId) -> DocT:
        raw = await self._manager.get(parse_object_id(record_id))
        return self.to_document(raw)

    async def list_public(self, scope: dict[str, Any] | None = None) -> list[DocT]:
        """Active records in display order, as served to the public site."""
        return self.to_documents(await self._manager.list_active(scope, strict=False).to_list())

    async def list_admin(self, scope: dict[str, Any] | None = None) -> list[DocT]:
        """Active records in display order, then inactive ones by recency."""
        return self.to_documents(await self._manager.list_admin(scope).to_list())

    async def list_admin_for(self, document: DocT) -> list[DocT]:
        """The admin listing of the partition family ``document`` belongs to."""
        return await self.list_admin(self.scope_of(document))

    async def create_record(self, fields: dict[str, Any]) -> DocT:
        return self.to_document(await self._manager.append(fields))

    async def update_record(self, record_id: str | ObjectId, fields: dict[str, Any]) -> DocT:
        raw = await self._manager.update(parse_object_id(record_id), fields)
        return self.to_document(raw)

    async def delete_record(self, record_id: str | ObjectId) -> DocT:
        raw = await self._manager.compact_delete(parse_object_id(record_id))
        return self.to_document(raw)

    async def delete_with_assets(self, record_id: str | ObjectId) -> tuple[DocT, list[str]]:
        """Delete a record and return the image handles it leaves behind."""
        deleted = await self.delete_record(record_id)
        return deleted, self.image_handles(deleted)

    async def move_record(self, record_id: str | ObjectId, target: int) -> DocT:
        raw = await self._manager.move(parse_object_id(record_id), target)
        return self.to_document(raw)

    async def toggle_record(self, record_id: str | ObjectId) -> DocT:
        raw = await self._manager.toggle(parse_object_id(record_id))
        return self.to_document(raw)

    async def reorder(
        self,
        record_ids: list[str],
        scope: dict[str, Any] | None = None,
    ) -> list[DocT]:
        """Renumber an ordered partition to follow ``record_ids``.

        Scoped families take the scope from the first listed record unless
        one is given.
        """
        ids = parse_object_ids(record_ids)
        if scope is None and self.policy.scope_fields:
            if not ids:
                msg = f"Reorder list for {self.entity} cannot be empty"
                raise ValidationFailure(msg, [{"field": "ids", "message": "at least one id required"}])
            scope = self.scope_of(await self.get(ids[0]))
        return self.to_documents(await self._manager.reorder_all(ids, scope))
