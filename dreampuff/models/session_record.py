import enum

from sqlalchemy import Column, String, DateTime, Enum

from dreampuff.database import Base
from dreampuff.models.product import new_id
from dreampuff.utils.time_utils import utcnow


class Position(str, enum.Enum):
    """Role declared by the staff member when a work session starts."""
    KASIR = "Kasir"
    KITCHEN = "Kitchen"
    MANAJEMEN = "Manajemen"


class SessionStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def _values(enum_cls):
    return [m.value for m in enum_cls]


class SessionRecord(Base):
    """
    One row per started work session.

    Attributes:
        id: Unique identifier
        name: Staff member's name
        position: Declared role
        login_time: Server-assigned start time
        status: Always written as active; nothing transitions it
    """
    __tablename__ = "user_sessions"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    position = Column(Enum(Position, values_callable=_values), nullable=False)
    login_time = Column(DateTime, nullable=False, default=utcnow, index=True)
    status = Column(
        Enum(SessionStatus, values_callable=_values),
        nullable=False,
        default=SessionStatus.ACTIVE,
    )

    def __repr__(self):
        return f"<SessionRecord(id={self.id}, name='{self.name}', position='{self.position}')>"
