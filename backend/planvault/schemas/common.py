from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def to_naive_utc(value: datetime) -> datetime:
    """Normalise an incoming timestamp to naive UTC; naive input is taken as UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


InputDateTime = Annotated[datetime, AfterValidator(to_naive_utc)]
OutputDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Wire models use camelCase keys; Python code uses snake_case attributes."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )


class MessageResponse(BaseModel):
    message: str
