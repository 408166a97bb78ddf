"""Repositories for timeline sections and their phases."""

import logging
from typing import Any

from bson import ObjectId

from content_api.common.ids import parse_object_id
from content_api.mongodb.repositories.ordered_repository import OrderedRepository
from content_api.mongodb.schemas import TimelinePhaseDocument, TimelineSectionDocument
from content_api.mongodb.store import DocumentStore
from content_api.ordering.manager import OrderedCollectionManager
from content_api.ordering.partition import OrderingPolicy

logger = logging.getLogger(__name__)

DEFAULT_SECTION_TITLE = "Our Journey"
DEFAULT_SECTION_SUBTITLE = "The story of our growth and evolution"

SECTION_POLICY = OrderingPolicy(
    collection="timeline_sections",
    entity="Timeline section",
    flag_field="is_active",
)
PHASE_POLICY = OrderingPolicy(
    collection="timeline_phases",
    entity="Timeline phase",
    flag_field="is_active",
    scope_fields=("section_id",),
)


def _phase_image_handles(document: TimelinePhaseDocument) -> list[str]:
    if document.image is not None and document.image.public_id:
        return [document.image.public_id]
    return []


class TimelineSectionRepository(OrderedRepository[TimelineSectionDocument]):
    policy = SECTION_POLICY
    document_type = TimelineSectionDocument

    async def get_or_create_default(self) -> TimelineSectionDocument:
        """The default "Our Journey" section, created on first use."""
        raw = await self._manager.collection.find_one({"title": DEFAULT_SECTION_TITLE})
        if raw is not None:
            return self.to_document(raw)
        logger.info("Creating default timeline section %r", DEFAULT_SECTION_TITLE)
        return await self.create_record(
            {"title": DEFAULT_SECTION_TITLE, "subtitle": DEFAULT_SECTION_SUBTITLE, "is_active": True}
        )

    async def delete_with_assets(self, record_id: str | ObjectId) -> tuple[TimelineSectionDocument, list[str]]:
        """Delete a section and all of its phases in one transaction."""
        phases = OrderedCollectionManager(self._store, PHASE_POLICY)
        dropped: list[dict[str, Any]] = []

        async def _drop_phases(section: dict[str, Any], session: Any) -> None:
            dropped[:] = await phases.drop_scope({"section_id": section["_id"]}, session)

        raw = await self._manager.compact_delete(parse_object_id(record_id), cascade=_drop_phases)
        section = self.to_document(raw)
        handles: list[str] = []
        for phase in dropped:
            handles.extend(_phase_image_handles(TimelinePhaseDocument.model_validate(phase)))
        logger.info("[section=%s] Deleted with %d phases", section.id, len(dropped))
        return section, handles


class TimelinePhaseRepository(OrderedRepository[TimelinePhaseDocument]):
    """Phases are ordered within their section."""

    policy = PHASE_POLICY
    document_type = TimelinePhaseDocument

    def __init__(self, store: DocumentStore) -> None:
        super().__init__(store)
        self._sections = TimelineSectionRepository(store)

    @property
    def sections(self) -> TimelineSectionRepository:
        return self._sections

    def image_handles(self, document: TimelinePhaseDocument) -> list[str]:
        return _phase_image_handles(document)

    async def resolve_section_id(self, section_id: str | ObjectId | None) -> ObjectId:
        """The given section's id (which must exist) or the default section's."""
        if section_id is None:
            section = await self._sections.get_or_create_default()
            return ObjectId(section.id)
        parsed = parse_object_id(section_id, "section_id")
        await self._sections.get(parsed)
        return parsed

    async def resolve_scope(self, section_id: str | None) -> dict[str, Any]:
        return {"section_id": await self.resolve_section_id(section_id)}

    async def create_record(self, fields: dict[str, Any]) -> TimelinePhaseDocument:
        section_id = await self.resolve_section_id(fields.get("section_id"))
        if not fields.get("image_alt"):
            fields = {**fields, "image_alt": fields.get("headline", "")}
        return await super().create_record({**fields, "section_id": section_id})

    async def update_record(self, record_id: str | ObjectId, fields: dict[str, Any]) -> TimelinePhaseDocument:
        if fields.get("section_id") is not None:
            fields = {**fields, "section_id": await self.resolve_section_id(fields["section_id"])}
        return await super().update_record(record_id, fields)

    async def list_for_sections(self, sections: list[TimelineSectionDocument]) -> list[TimelinePhaseDocument]:
        """Active phases of each section, section by section."""
        phases: list[TimelinePhaseDocument] = []
        for section in sections:
            phases.extend(await self.list_public({"section_id": ObjectId(section.id)}))
        return phases
