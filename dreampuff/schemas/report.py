from datetime import date
from typing import Optional

from dreampuff.schemas.base import CamelModel, UtcDatetime
from dreampuff.schemas.session import SessionSnapshot


class ReportItem(CamelModel):
    product_name: str
    category: str
    quantity: int
    image: str = ""


class DailyReportResponse(CamelModel):
    """Daily report annotated with a human-readable (id-ID) date."""
    id: str
    timestamp: UtcDatetime
    readable_date: str
    session: SessionSnapshot
    items_sold: list[ReportItem]
    items_rejected: list[ReportItem]
    total_sold: int
    total_rejected: int


class AggregatedProduct(CamelModel):
    product_name: str
    category: str
    image: str
    total_sold: int
    total_rejected: int


class ReportSummary(CamelModel):
    """Per-product totals folded over all daily reports in a date range."""
    start: date
    end: date
    items: list[AggregatedProduct]
    message: Optional[str] = None
