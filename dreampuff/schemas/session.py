from pydantic import BaseModel, Field, field_validator

from dreampuff.models.session_record import Position, SessionStatus
from dreampuff.schemas.base import CamelModel, UtcDatetime


class SessionSnapshot(BaseModel):
    """Who is working: denormalized into every history entry."""
    name: str = Field(..., min_length=1, max_length=255, description="Staff member's name")
    position: Position = Field(..., description="Declared role")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Nama harus diisi.")
        return value


class SessionCreate(SessionSnapshot):
    """Schema for persisting a started work session."""
    pass


class SessionRecordResponse(CamelModel):
    id: str
    name: str
    position: Position
    login_time: UtcDatetime
    status: SessionStatus
