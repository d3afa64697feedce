from sqlalchemy import Column, Integer, String, DateTime, JSON

from dreampuff.database import Base
from dreampuff.models.product import new_id
from dreampuff.utils.time_utils import utcnow


class DailyReport(Base):
    """
    Daily snapshot of sold vs. remaining stock.

    Rows are written by the external daily reset process and never modified
    here. Item lists hold {"productName", "category", "quantity", "image"}.
    """
    __tablename__ = "daily_reports"

    id = Column(String(32), primary_key=True, default=new_id)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    session = Column(JSON, nullable=False)
    items_sold = Column(JSON, nullable=False, default=list)
    items_rejected = Column(JSON, nullable=False, default=list)
    total_sold = Column(Integer, nullable=False, default=0)
    total_rejected = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<DailyReport(id={self.id}, timestamp={self.timestamp})>"
