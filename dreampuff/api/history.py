from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dreampuff.api.deps import require_api_key
from dreampuff.database import get_db
from dreampuff.services.history_service import HistoryService
from dreampuff.schemas.history import HistorySummary

router = APIRouter(
    prefix="/history",
    tags=["History"],
    dependencies=[Depends(require_api_key)],
)


@router.get(
    "",
    response_model=HistorySummary,
    summary="Stock movement summary",
    description="Total stock in and out over the trailing window, with every stock addition."
)
def history_summary(
    hours: int = Query(24, ge=1, description="Trailing window in hours"),
    db: Session = Depends(get_db)
):
    return HistoryService(db).summary(hours=hours)
