from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from dreampuff.utils.time_utils import to_utc_z


class CamelModel(BaseModel):
    """Base schema: snake_case attributes, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Stored timestamps are naive UTC; emit them as ISO-8601 with a trailing Z
UtcDatetime = Annotated[datetime, PlainSerializer(to_utc_z, return_type=str)]


class MessageResponse(BaseModel):
    """Human-readable acknowledgement."""
    message: str
