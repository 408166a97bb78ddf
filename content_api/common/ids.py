"""ObjectId parsing for path and body identifiers."""

from bson import ObjectId
from bson.errors import InvalidId

from content_api.ordering.errors import ValidationFailure


def parse_object_id(value: str | ObjectId, field: str = "id") -> ObjectId:
    """Parse a client supplied id.

    Raises:
        ValidationFailure: If ``value`` is not a valid ObjectId.
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError) as e:
        msg = f"Invalid {field} format"
        raise ValidationFailure(msg, [{"field": field, "message": "must be a 24 character hex ObjectId"}]) from e


def parse_object_ids(values: list[str], field: str = "ids") -> list[ObjectId]:
    return [parse_object_id(value, field) for value in values]
