"""Dense-sequence arithmetic shared by collection and embedded orderings.

Every ordered partition holds ``order`` values ``0..n-1``. Mutations are
expressed as a :class:`ShiftRange`: a contiguous band of orders that moves by
``delta``. Top-level collections turn the band into an ``$inc`` query,
embedded arrays apply it to the items in memory.
"""

from collections.abc import Iterable, MutableSequence
from dataclasses import dataclass
from typing import Any

from content_api.ordering.errors import InvalidTargetError, InvariantViolationError

ORDER_FIELD = "order"

# Order value of records outside any ordered partition (e.g. inactive ones).
UNORDERED = -1


@dataclass(frozen=True)
class ShiftRange:
    """Orders in ``[lower, upper]`` move by ``delta``; ``upper=None`` is unbounded."""

    lower: int
    upper: int | None
    delta: int

    def contains(self, order: int) -> bool:
        if order < self.lower:
            return False
        return self.upper is None or order <= self.upper

    def query(self) -> dict[str, Any]:
        """Mongo filter fragment selecting the band."""
        bounds: dict[str, int] = {"$gte": self.lower}
        if self.upper is not None:
            bounds["$lte"] = self.upper
        return {ORDER_FIELD: bounds}

    def apply(
        self,
        items: MutableSequence[dict[str, Any]],
        skip: object | None = None,
    ) -> int:
        """Shift matching items in place, leaving the one whose ``_id`` is ``skip``.

        Returns:
            Number of shifted items.
        """
        shifted = 0
        for item in items:
            if skip is not None and item.get("_id") == skip:
                continue
            if self.contains(item[ORDER_FIELD]):
                item[ORDER_FIELD] += self.delta
                shifted += 1
        return shifted


def removal_shift(order: int) -> ShiftRange:
    """Band that closes the gap left at ``order``."""
    return ShiftRange(lower=order + 1, upper=None, delta=-1)


def validate_target(target: int, size: int) -> None:
    if isinstance(target, bool) or not isinstance(target, int):
        msg = "Target order must be an integer"
        raise InvalidTargetError(msg)
    if not 0 <= target < size:
        msg = f"Target order {target} is out of range [0, {size - 1}]"
        raise InvalidTargetError(msg)


def move_shift(current: int, target: int, size: int) -> ShiftRange | None:
    """Band of siblings displaced when moving ``current`` to ``target``.

    Returns:
        ``None`` when the move is a no-op.

    Raises:
        InvalidTargetError: If ``target`` is outside ``[0, size-1]``.
    """
    validate_target(target, size)
    if target == current:
        return None
    if target < current:
        return ShiftRange(lower=target, upper=current - 1, delta=1)
    return ShiftRange(lower=current + 1, upper=target, delta=-1)


def check_density(orders: Iterable[int], where: str) -> None:
    """Raise unless ``orders`` is exactly ``0..n-1`` in some arrangement."""
    values = sorted(orders)
    if values != list(range(len(values))):
        msg = f"Order sequence of {where} is not dense: {values}"
        raise InvariantViolationError(msg)


def check_permutation(requested: list[Any], existing: Iterable[Any]) -> None:
    """Batch reorders must name every member of the partition exactly once."""
    if len(set(requested)) != len(requested):
        msg = "Reorder list contains duplicate ids"
        raise InvalidTargetError(msg)
    if set(requested) != set(existing):
        msg = "Reorder list must contain exactly the ids of the partition"
        raise InvalidTargetError(msg)
