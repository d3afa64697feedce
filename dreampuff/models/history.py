from sqlalchemy import Column, Integer, String, DateTime, JSON

from dreampuff.database import Base
from dreampuff.models.product import new_id
from dreampuff.utils.time_utils import utcnow


class SaleHistory(Base):
    """
    Append-only record of one committed sale batch.

    Attributes:
        id: Unique identifier
        timestamp: Commit time
        session: Snapshot {"name", "position"} of who recorded the sale
        items: Ordered [{"productId", "productName", "quantity", "image"}]
        total_items: Sum of item quantities
    """
    __tablename__ = "sales_history"

    id = Column(String(32), primary_key=True, default=new_id)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    session = Column(JSON, nullable=False)
    items = Column(JSON, nullable=False)
    total_items = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<SaleHistory(id={self.id}, total_items={self.total_items})>"


class StockUpdateHistory(Base):
    """
    Append-only record of stock added to a single product.

    Attributes:
        id: Unique identifier
        timestamp: Commit time
        session: Snapshot {"name", "position"}
        product: Snapshot {"id", "name", "image"}
        quantity_added: Positive quantity added
        stock_after: Resulting stock value
    """
    __tablename__ = "stock_history"

    id = Column(String(32), primary_key=True, default=new_id)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)
    session = Column(JSON, nullable=False)
    product = Column(JSON, nullable=False)
    quantity_added = Column(Integer, nullable=False)
    stock_after = Column(Integer, nullable=False)

    def __repr__(self):
        return f"<StockUpdateHistory(id={self.id}, quantity_added={self.quantity_added})>"
