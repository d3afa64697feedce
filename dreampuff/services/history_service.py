from datetime import datetime, timedelta
from typing import List

from sqlalchemy.orm import Session

from dreampuff.models.history import SaleHistory, StockUpdateHistory
from dreampuff.utils.time_utils import utcnow


class HistoryService:
    """Read-side queries over sale and stock-update history."""

    def __init__(self, db: Session):
        self.db = db

    def recent_sales(self, limit: int = 20) -> List[SaleHistory]:
        """Get the latest sale entries, newest first."""
        return (
            self.db.query(SaleHistory)
            .order_by(SaleHistory.timestamp.desc())
            .limit(limit)
            .all()
        )

    def summary(self, hours: int = 24) -> dict:
        """
        Stock in/out totals over the trailing ``hours``.

        Stock in sums quantity_added of stock-update entries; stock out sums
        total_items of sale entries.
        """
        try:
            since = utcnow() - timedelta(hours=hours)
        except OverflowError:
            since = datetime.min

        additions = (
            self.db.query(StockUpdateHistory)
            .filter(StockUpdateHistory.timestamp >= since)
            .order_by(StockUpdateHistory.timestamp.desc())
            .all()
        )
        sales = self.db.query(SaleHistory).filter(SaleHistory.timestamp >= since).all()

        return {
            "total_stock_in": sum(a.quantity_added for a in additions),
            "total_stock_out": sum(s.total_items or 0 for s in sales),
            "stock_additions": [
                {
                    "product_name": a.product["name"],
                    "quantity_added": a.quantity_added,
                    "timestamp": a.timestamp,
                }
                for a in additions
            ],
            "timeframe_hours": hours,
        }
