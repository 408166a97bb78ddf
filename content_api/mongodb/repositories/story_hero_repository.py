"""Repositories for the story hero banner and its embedded images."""

import logging
from typing import Any

from bson import ObjectId

from content_api.common.ids import parse_object_id, parse_object_ids
from content_api.mongodb.schemas import StoryHeroDocument, StoryImageDocument
from content_api.mongodb.store import CollectionGateway, DocumentStore, get_document_store
from content_api.ordering.embedded import EmbeddedSequenceManager
from content_api.ordering.errors import NotFoundError
from content_api.ordering.manager import LOCK_COLLECTION, PROTECTED_FIELDS, utc_now

logger = logging.getLogger(__name__)

STORY_HERO_COLLECTION = "storyhero"
ACTIVE_QUERY = {"is_active": True}

# Lock document taken by every transaction that creates the active banner.
ACTIVE_LOCK_KEY = f"{STORY_HERO_COLLECTION}:active"


class StoryHeroRepository:
    """The single active story hero, created with defaults on first read."""

    entity = "Story hero"

    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    @classmethod
    def create(cls, store: DocumentStore | None = None) -> "StoryHeroRepository":
        return cls(store or get_document_store())

    @property
    def collection(self) -> CollectionGateway:
        return self._store.collection(STORY_HERO_COLLECTION)

    def to_document(self, raw: dict[str, Any]) -> StoryHeroDocument:
        document = StoryHeroDocument.model_validate(raw)
        document.images.sort(key=lambda image: image.order)
        return document

    async def get_or_create_active(self) -> StoryHeroDocument:
        raw = await self.collection.find_one(ACTIVE_QUERY)
        if raw is not None:
            return self.to_document(raw)

        async def _create(session: Any) -> dict[str, Any]:
            await self._store.collection(LOCK_COLLECTION).update_one(
                {"_id": ACTIVE_LOCK_KEY},
                {"$inc": {"version": 1}},
                upsert=True,
                session=session,
            )
            existing = await self.collection.find_one(ACTIVE_QUERY, session=session)
            if existing is not None:
                return existing
            document = StoryHeroDocument().model_dump(by_alias=True, exclude={"id"})
            document["_id"] = await self.collection.insert_one(document, session=session)
            logger.info("[story_hero=%s] Created with defaults", document["_id"])
            return document

        return self.to_document(await self._store.run_in_transaction(_create))

    async def update_content(self, fields: dict[str, Any]) -> StoryHeroDocument:
        """Update text, timing and colours; ``images`` is never taken from ``fields``."""
        current = await self.get_or_create_active()
        hero_id = ObjectId(current.id)
        changes: dict[str, Any] = {}
        for key, value in fields.items():
            if key in PROTECTED_FIELDS or key in ("images", "is_active"):
                continue
            if key == "colors":
                changes.update({f"colors.{name}": color for name, color in value.items()})
            else:
                changes[key] = value

        async def _update(session: Any) -> dict[str, Any]:
            await self.collection.update_one(
                {"_id": hero_id},
                {"$set": {**changes, "updated_at": utc_now()}},
                session=session,
            )
            raw = await self.collection.find_one({"_id": hero_id}, session=session)
            if raw is None:
                raise NotFoundError(self.entity, hero_id)
            return raw

        updated = await self._store.run_in_transaction(_update)
        logger.info("[story_hero=%s] Updated %s", hero_id, sorted(changes))
        return self.to_document(updated)

    async def delete_active(self) -> tuple[StoryHeroDocument, list[str]]:
        """Delete the active banner; returns it with its image store handles."""

        async def _delete(session: Any) -> dict[str, Any]:
            raw = await self.collection.find_one(ACTIVE_QUERY, session=session)
            if raw is None:
                raise NotFoundError(self.entity, "active")
            await self.collection.delete_one({"_id": raw["_id"]}, session=session)
            return raw

        deleted = self.to_document(await self._store.run_in_transaction(_delete))
        logger.info("[story_hero=%s] Deleted with %d images", deleted.id, len(deleted.images))
        return deleted, [image.public_id for image in deleted.images if image.public_id]


class StoryImageRepository:
    """Ordered background images embedded in the active story hero."""

    field = "images"
    entity = "Image"

    def __init__(self, heroes: StoryHeroRepository, manager: EmbeddedSequenceManager) -> None:
        self._heroes = heroes
        self._manager = manager

    @classmethod
    def create(cls, store: DocumentStore | None = None) -> "StoryImageRepository":
        store = store or get_document_store()
        manager = EmbeddedSequenceManager(
            store,
            STORY_HERO_COLLECTION,
            cls.field,
            parent_entity=StoryHeroRepository.entity,
            entity=cls.entity,
        )
        return cls(StoryHeroRepository(store), manager)

    async def _parent_id(self) -> ObjectId:
        hero = await self._heroes.get_or_create_active()
        return ObjectId(hero.id)

    @staticmethod
    def _to_items(raws: list[dict[str, Any]]) -> list[StoryImageDocument]:
        return [StoryImageDocument.model_validate(raw) for raw in raws]

    async def list_items(self) -> list[StoryImageDocument]:
        return self._to_items(await self._manager.list_items(await self._parent_id()))

    async def add(self, fields: dict[str, Any]) -> StoryImageDocument:
        raw = await self._manager.append(await self._parent_id(), fields)
        return StoryImageDocument.model_validate(raw)

    async def remove(self, image_id: str | ObjectId) -> StoryImageDocument:
        raw = await self._manager.remove(await self._parent_id(), parse_object_id(image_id, "image id"))
        return StoryImageDocument.model_validate(raw)

    async def move(self, image_id: str | ObjectId, target: int) -> list[StoryImageDocument]:
        raws = await self._manager.move(await self._parent_id(), parse_object_id(image_id, "image id"), target)
        return self._to_items(raws)

    async def reorder(self, image_ids: list[str]) -> list[StoryImageDocument]:
        raws = await self._manager.reorder_all(await self._parent_id(), parse_object_ids(image_ids, "image ids"))
        return self._to_items(raws)
