import logging
from typing import List

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from dreampuff.exceptions import TransportError
from dreampuff.models.session_record import Position, SessionRecord, SessionStatus

logger = logging.getLogger(__name__)


class SessionService:
    """Remote side of the work-session lifecycle: append-only session records."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, position: Position) -> SessionRecord:
        """Persist a started work session. Status is always written as active."""
        record = SessionRecord(name=name, position=position, status=SessionStatus.ACTIVE)
        try:
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error saving session record: {e}")
            raise TransportError(f"Database error: {e}") from e

        logger.info(f"Session {record.id} started by {name} ({position.value})")
        return record

    def recent(self, limit: int = 20) -> List[SessionRecord]:
        """Get the latest session records, newest login first."""
        return (
            self.db.query(SessionRecord)
            .order_by(SessionRecord.login_time.desc())
            .limit(limit)
            .all()
        )
