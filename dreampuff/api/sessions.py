import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from dreampuff.api.deps import require_api_key, to_http_exception
from dreampuff.database import get_db
from dreampuff.exceptions import DreampuffError
from dreampuff.services.session_service import SessionService
from dreampuff.schemas.session import SessionCreate, SessionRecordResponse
from dreampuff.tasks.notification_tasks import send_session_notification

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/sessions",
    tags=["Sessions"],
    dependencies=[Depends(require_api_key)],
)


@router.post(
    "",
    response_model=SessionRecordResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a started work session",
    description="""
    Persist who started working and in which role.

    **Background Processing:**
    A notification task is queued after the record is saved. Queueing is
    best-effort and never fails the request.
    """
)
def create_session(
    payload: SessionCreate,
    db: Session = Depends(get_db)
):
    try:
        record = SessionService(db).create(payload.name, payload.position)
    except DreampuffError as e:
        raise to_http_exception(e)

    try:
        send_session_notification.delay(record.name, record.position.value)
    except Exception as e:
        logger.warning(f"Could not queue session notification for {record.name}: {e}")

    return record


@router.get(
    "",
    response_model=list[SessionRecordResponse],
    summary="List recent work sessions",
    description="Get the latest session records, newest login first."
)
def list_sessions(
    limit: int = Query(20, ge=1, le=100, description="Max records to return"),
    db: Session = Depends(get_db)
):
    return SessionService(db).recent(limit=limit)
