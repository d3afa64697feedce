from datetime import date

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dreampuff.api.deps import require_api_key, to_http_exception
from dreampuff.database import get_db
from dreampuff.exceptions import DreampuffError
from dreampuff.services.report_service import NO_DATA_MESSAGE, ReportService
from dreampuff.schemas.report import DailyReportResponse, ReportSummary

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(require_api_key)],
)


@router.get(
    "",
    response_model=list[DailyReportResponse],
    summary="List recent daily reports"
)
def list_reports(
    limit: int = Query(5, ge=1, le=100, description="Max reports to return"),
    db: Session = Depends(get_db)
):
    """Newest reports first, each carrying an Indonesian readable date."""
    return ReportService(db).recent(limit=limit)


@router.get(
    "/summary",
    response_model=ReportSummary,
    summary="Aggregate reports over a date range",
    description="Fold every daily report between two local calendar days into per-product totals."
)
def report_summary(
    start: date = Query(..., description="First day, YYYY-MM-DD"),
    end: date = Query(..., description="Last day, YYYY-MM-DD"),
    db: Session = Depends(get_db)
):
    try:
        items = ReportService(db).aggregate(start, end)
    except DreampuffError as e:
        raise to_http_exception(e)
    return ReportSummary(
        start=start,
        end=end,
        items=items,
        message=None if items else NO_DATA_MESSAGE,
    )
