import enum
import uuid

from sqlalchemy import Column, Integer, String, DateTime, Enum, CheckConstraint

from dreampuff.database import Base
from dreampuff.utils.time_utils import utcnow

PLACEHOLDER_IMAGE = "https://placehold.co/600x400.png"


class ProductCategory(str, enum.Enum):
    """Closed set of catalog categories."""
    CREAMPUFF = "Creampuff"
    CHEESECAKE = "Cheesecake"
    MILLECREPES = "Millecrepes"
    MINUMAN = "Minuman"
    SNACKBOX = "Snackbox"
    LAINNYA = "Lainnya"


def new_id() -> str:
    return uuid.uuid4().hex


class Product(Base):
    """
    Product model: the single mutable source of truth for current stock.

    Attributes:
        id: Opaque stable identifier
        name: Product name (unique case-insensitively for lookups)
        stock: Available quantity (must be non-negative)
        image: Image URL
        category: One of ProductCategory
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    stock = Column(Integer, nullable=False, default=0)
    image = Column(String(1024), nullable=False, default=PLACEHOLDER_IMAGE)
    category = Column(
        Enum(ProductCategory, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProductCategory.LAINNYA,
    )
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Database-level constraint so a bad write can never persist negative stock
    __table_args__ = (
        CheckConstraint('stock >= 0', name='check_stock_non_negative'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', stock={self.stock})>"
