from pydantic import Field, StrictInt

from dreampuff.schemas.base import CamelModel, UtcDatetime
from dreampuff.schemas.session import SessionSnapshot


class SaleItem(CamelModel):
    product_id: str
    product_name: str
    quantity: int
    image: str


class SaleCreate(CamelModel):
    """Schema for recording a sale batch: product ID -> quantity sold."""
    items: dict[str, StrictInt] = Field(..., description="Quantity sold per product ID")
    session: SessionSnapshot


class SaleHistoryResponse(CamelModel):
    id: str
    timestamp: UtcDatetime
    session: SessionSnapshot
    items: list[SaleItem]
    total_items: int


class StockAddCreate(CamelModel):
    """Schema for adding stock to a single product."""
    product_id: str = Field(..., min_length=1)
    quantity: StrictInt = Field(..., gt=0, description="Quantity added")
    session: SessionSnapshot


class ProductSnapshot(CamelModel):
    id: str
    name: str
    image: str


class StockUpdateHistoryResponse(CamelModel):
    id: str
    timestamp: UtcDatetime
    session: SessionSnapshot
    product: ProductSnapshot
    quantity_added: int
    stock_after: int


class StockAddition(CamelModel):
    product_name: str
    quantity_added: int
    timestamp: UtcDatetime


class HistorySummary(CamelModel):
    """Stock movement totals over a trailing window."""
    total_stock_in: int
    total_stock_out: int
    stock_additions: list[StockAddition]
    timeframe_hours: int
