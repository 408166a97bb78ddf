from pydantic import BaseModel, ConfigDict


class BaseContentModel(BaseModel):
    """Base Pydantic model for the content API.

    Provides defaults specific to our codebase and makes global changes easier.
    """

    model_config = ConfigDict(
        frozen=True,
        revalidate_instances="always",
        validate_assignment=True,
        populate_by_name=True,
    )


class BaseRequestModel(BaseModel):
    """Base model for request payloads.

    Unknown keys are dropped, which is how server-managed fields such as
    ``order``, ``_id`` and the timestamps are stripped from client input.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
        use_enum_values=True,
    )
