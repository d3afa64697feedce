from datetime import date
from typing import Dict, Iterable, List
import logging

from sqlalchemy.orm import Session

from dreampuff.exceptions import ValidationError
from dreampuff.models.report import DailyReport
from dreampuff.utils.time_utils import format_readable_date, local_day_bounds
from dreampuff.utils.sorting import name_sort_key

logger = logging.getLogger(__name__)

NO_DATA_MESSAGE = "Tidak ada data untuk rentang tanggal ini."


def aggregate_reports(reports: Iterable[DailyReport]) -> List[dict]:
    """
    Fold daily reports into per-product sold/rejected totals.

    Reports are deduplicated by id, so the same report fetched twice is
    counted once. The result is sorted by product name, case-insensitively
    with lowercase first among names that differ only in case.
    """
    seen = set()
    totals: Dict[str, dict] = {}

    def entry_for(item: dict) -> dict:
        name = item["productName"]
        if name not in totals:
            totals[name] = {
                "productName": name,
                "category": item.get("category", ""),
                "image": item.get("image", ""),
                "totalSold": 0,
                "totalRejected": 0,
            }
        return totals[name]

    for report in reports:
        if report.id in seen:
            continue
        seen.add(report.id)

        for item in report.items_sold or []:
            entry_for(item)["totalSold"] += item.get("quantity", 0)
        for item in report.items_rejected or []:
            entry_for(item)["totalRejected"] += item.get("quantity", 0)

    return sorted(totals.values(), key=lambda entry: name_sort_key(entry["productName"]))


class ReportService:
    """Read-side access to daily reports."""

    def __init__(self, db: Session):
        self.db = db

    def recent(self, limit: int = 5) -> List[dict]:
        """Most recent reports, newest first, each with a readable date."""
        reports = (
            self.db.query(DailyReport)
            .order_by(DailyReport.timestamp.desc())
            .limit(limit)
            .all()
        )
        return [
            {
                "id": r.id,
                "timestamp": r.timestamp,
                "readable_date": format_readable_date(r.timestamp),
                "session": r.session,
                "items_sold": r.items_sold or [],
                "items_rejected": r.items_rejected or [],
                "total_sold": r.total_sold,
                "total_rejected": r.total_rejected,
            }
            for r in reports
        ]

    def aggregate(self, start_day: date, end_day: date) -> List[dict]:
        """
        Per-product totals over all reports dated within [start_day, end_day].

        Args:
            start_day: First local calendar day (from 00:00:00.000)
            end_day: Last local calendar day (until 23:59:59.999)

        Returns:
            Aggregated rows; an empty list when no report is in range
        """
        if end_day < start_day:
            raise ValidationError("End date must not be before start date")

        start, end = local_day_bounds(start_day, end_day)
        reports = (
            self.db.query(DailyReport)
            .filter(DailyReport.timestamp >= start, DailyReport.timestamp <= end)
            .order_by(DailyReport.timestamp)
            .all()
        )
        logger.info(f"Aggregating {len(reports)} report(s) from {start_day} to {end_day}")
        return aggregate_reports(reports)
