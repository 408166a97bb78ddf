"""Partitions: the sibling sets inside which ``order`` must stay dense."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Partition:
    """One sibling set of a collection.

    Attributes:
        key: Stable name, also used as the lock document id.
        query: Mongo filter selecting exactly the partition's records.
        ordered: ``True`` for dense ``order`` partitions, ``False`` for
            recency-sorted ones whose records carry ``order = -1``.
    """

    key: str
    query: dict[str, Any]
    ordered: bool = True


@dataclass(frozen=True)
class OrderingPolicy:
    """How one entity family maps its records onto partitions.

    Attributes:
        collection: Collection holding the records.
        entity: Human-readable label used in errors and logs.
        flag_field: Boolean activation field; ``True`` records are ordered,
            ``False`` ones are recency-sorted. ``None`` means every record
            lives in a single ordered partition per scope.
        scope_fields: Fields that split the collection into independent
            sequences (e.g. sponsor ``type``, phase ``section_id``).
        flag_default: Flag value assumed when a record does not carry one.
    """

    collection: str
    entity: str
    flag_field: str | None = None
    scope_fields: tuple[str, ...] = field(default_factory=tuple)
    flag_default: bool = True

    @property
    def partition_fields(self) -> tuple[str, ...]:
        if self.flag_field is None:
            return self.scope_fields
        return (*self.scope_fields, self.flag_field)

    def _scope_of(self, values: dict[str, Any]) -> dict[str, Any]:
        return {name: values.get(name) for name in self.scope_fields}

    def _key(self, scope: dict[str, Any], suffix: str) -> str:
        parts = [self.collection, *(f"{k}={v}" for k, v in scope.items()), suffix]
        return ":".join(parts)

    def ordered_partition(self, scope: dict[str, Any] | None = None) -> Partition:
        """The dense partition (active records) for ``scope``."""
        resolved = self._scope_of(scope or {})
        query = dict(resolved)
        if self.flag_field is not None:
            query[self.flag_field] = True
        return Partition(key=self._key(resolved, "ordered"), query=query, ordered=True)

    def recency_partition(self, scope: dict[str, Any] | None = None) -> Partition:
        """The recency-sorted partition (inactive records) for ``scope``."""
        if self.flag_field is None:
            msg = f"{self.entity} has no activation flag"
            raise ValueError(msg)
        resolved = self._scope_of(scope or {})
        query = {**resolved, self.flag_field: False}
        return Partition(key=self._key(resolved, "recency"), query=query, ordered=False)

    def is_active(self, record: dict[str, Any]) -> bool:
        if self.flag_field is None:
            return True
        return bool(record.get(self.flag_field, self.flag_default))

    def partition_of(self, record: dict[str, Any]) -> Partition:
        """The partition a record (or a record about to be written) belongs to."""
        if self.is_active(record):
            return self.ordered_partition(record)
        return self.recency_partition(record)
