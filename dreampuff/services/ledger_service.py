from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Iterable, List, Mapping, Optional, Tuple
import logging

from dreampuff.exceptions import (
    InsufficientStockError,
    NotFoundError,
    TransportError,
    ValidationError,
)
from dreampuff.models.product import Product, ProductCategory, PLACEHOLDER_IMAGE
from dreampuff.models.history import SaleHistory, StockUpdateHistory
from dreampuff.schemas.product import ProductResponse
from dreampuff.utils.cache import cache_service
from dreampuff.utils.sorting import name_sort_key

logger = logging.getLogger(__name__)


class StockLedger:
    """
    All reads and writes of the product catalog's stock.

    Every mutation runs inside a single database transaction: either all
    product rows and the derived history entry are written, or nothing is.

    CONCURRENCY:
    ============
    Product rows touched by a sale or a stock addition are read with
    SELECT ... FOR UPDATE, so two batches touching the same product are
    serialized by the database and the stock check always sees committed
    values. Direct stock sets are plain overrides (last write wins).
    On SQLite the lock clause is ignored; SQLite serializes writers anyway.
    """

    CACHE_PREFIX = "products"
    CATALOG_KEY = "all"

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Catalog reads
    # ------------------------------------------------------------------

    def list_products(
        self,
        name: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[dict]:
        """
        Get the catalog, optionally filtered.

        A category filter takes precedence over a name filter; both are
        case-insensitive and the name filter matches substrings.
        """
        products = cache_service.get(self.CACHE_PREFIX, self.CATALOG_KEY)
        if products is None:
            rows = sorted(self.db.query(Product).all(), key=lambda p: name_sort_key(p.name))
            products = [
                ProductResponse.model_validate(p).model_dump(mode="json") for p in rows
            ]
            cache_service.set(self.CACHE_PREFIX, self.CATALOG_KEY, products)

        category = (category or "").strip().lower()
        name = (name or "").strip().lower()
        if category:
            return [p for p in products if p["category"].lower() == category]
        if name:
            return [p for p in products if name in p["name"].lower()]
        return products

    def get_product(self, product_id: str) -> Product:
        product = self.db.query(Product).filter(Product.id == product_id).first()
        if not product:
            raise NotFoundError(f"Product with ID {product_id} not found")
        return product

    def find_by_name(self, name: str) -> Optional[Product]:
        """Exact, case-insensitive name lookup."""
        return (
            self.db.query(Product)
            .filter(func.lower(Product.name) == name.strip().lower())
            .first()
        )

    # ------------------------------------------------------------------
    # Catalog writes
    # ------------------------------------------------------------------

    def create_product(self, name: str, category: ProductCategory) -> Product:
        """Create a product with zero stock and the placeholder image."""
        product = Product(name=name, category=category, stock=0, image=PLACEHOLDER_IMAGE)
        self._commit(product)
        logger.info(f"Product {product.id} ({product.name}) created")
        return product

    def update_product(
        self,
        product_id: str,
        name: Optional[str] = None,
        image: Optional[str] = None,
    ) -> Product:
        """
        Rename a product and/or replace its image.

        Fields left as None are unchanged. An empty image restores the
        placeholder. Stock and category are not touched.
        """
        product = self.get_product(product_id)
        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Product name must not be blank")
            product.name = name
        if image is not None:
            product.image = image.strip() or PLACEHOLDER_IMAGE
        self._commit()

        logger.info(f"Product {product_id} updated")
        return product

    def delete_product(self, product_id: str) -> str:
        """Hard-delete a product; returns its name."""
        product = self.get_product(product_id)
        name = product.name
        self.db.delete(product)
        self._commit()
        logger.info(f"Product {product_id} ({name}) deleted")
        return name

    # ------------------------------------------------------------------
    # Stock paths
    # ------------------------------------------------------------------

    def record_sale(self, quantities: Mapping[str, int], session: dict) -> SaleHistory:
        """
        Decrement stock for a batch of products and append one sale entry.

        Args:
            quantities: Product ID -> quantity sold; zero entries are ignored
            session: Snapshot {"name", "position"} of who records the sale

        Returns:
            The created SaleHistory entry

        Raises:
            ValidationError: Negative quantity or nothing to record
            NotFoundError: A product does not exist
            InsufficientStockError: A quantity exceeds the product's stock
        """
        pending: List[Tuple[str, int]] = []
        for product_id, quantity in quantities.items():
            if quantity < 0:
                raise ValidationError(f"Quantity for product {product_id} must not be negative")
            if quantity:
                pending.append((product_id, quantity))
        if not pending:
            raise ValidationError("No items to record")

        try:
            products = self._lock_products(product_id for product_id, _ in pending)

            for product_id, quantity in pending:
                product = products[product_id]
                if quantity > product.stock:
                    raise InsufficientStockError(product.name, product.stock, quantity)

            items = []
            for product_id, quantity in pending:
                product = products[product_id]
                product.stock -= quantity
                items.append({
                    "productId": product.id,
                    "productName": product.name,
                    "quantity": quantity,
                    "image": product.image,
                })

            entry = SaleHistory(
                session=dict(session),
                items=items,
                total_items=sum(item["quantity"] for item in items),
            )
            self._commit(entry)

        except (NotFoundError, InsufficientStockError):
            self.db.rollback()
            raise

        logger.info(
            f"Sale {entry.id} recorded by {session['name']}: "
            f"{entry.total_items} item(s) across {len(items)} product(s)"
        )
        return entry

    def add_stock(self, product_id: str, quantity: int, session: dict) -> StockUpdateHistory:
        """
        Increment one product's stock and append a stock-update entry.

        Raises:
            ValidationError: quantity is not positive
            NotFoundError: The product does not exist
        """
        if quantity <= 0:
            raise ValidationError("Quantity added must be positive")

        try:
            product = self._lock_products([product_id])[product_id]
            product.stock += quantity
            entry = StockUpdateHistory(
                session=dict(session),
                product={"id": product.id, "name": product.name, "image": product.image},
                quantity_added=quantity,
                stock_after=product.stock,
            )
            self._commit(entry)

        except NotFoundError:
            self.db.rollback()
            raise

        logger.info(f"Added {quantity} to {product.name}; stock is now {entry.stock_after}")
        return entry

    def set_stock(self, updates: Iterable[Tuple[str, int]]) -> List[Product]:
        """
        Administrative override: set stock values as one atomic batch.

        No history is produced and values are written as given; the database
        constraint still rejects negatives. An unknown ID aborts the batch.
        """
        updates = list(updates)
        ids = {product_id for product_id, _ in updates}
        products = {
            p.id: p for p in self.db.query(Product).filter(Product.id.in_(ids)).all()
        }
        missing = sorted(ids - products.keys())
        if missing:
            raise NotFoundError(f"Product(s) not found: {', '.join(missing)}")

        for product_id, stock in updates:
            products[product_id].stock = stock
        self._commit()

        logger.info(f"Stock set for {len(products)} product(s)")
        return list(products.values())

    def set_stock_by_name(self, name: str, stock: int) -> Product:
        product = self.find_by_name(name)
        if not product:
            raise NotFoundError(f"Product with name \"{name}\" not found.")
        self.set_stock([(product.id, stock)])
        return product

    def reset_all_stock(self) -> int:
        """Set every product's stock to zero in one batch."""
        ids = [row.id for row in self.db.query(Product.id).all()]
        if not ids:
            return 0
        self.set_stock((product_id, 0) for product_id in ids)
        return len(ids)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock_products(self, product_ids: Iterable[str]) -> dict:
        ids = list(dict.fromkeys(product_ids))
        rows = (
            self.db.query(Product)
            .filter(Product.id.in_(ids))
            .with_for_update()  # Pessimistic locking
            .all()
        )
        products = {p.id: p for p in rows}
        for product_id in ids:
            if product_id not in products:
                raise NotFoundError(f"Product with ID {product_id} not found")
        return products

    def _commit(self, new_row=None) -> None:
        """Commit the current unit of work, rolling back on any database error."""
        try:
            if new_row is not None:
                self.db.add(new_row)
            self.db.commit()
            if new_row is not None:
                self.db.refresh(new_row)
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error committing stock change: {e}")
            raise TransportError("Stock constraint violated - concurrent modification detected") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error committing stock change: {e}")
            raise TransportError(f"Database error: {e}") from e

        # Catalog changed; drop the cached copy
        cache_service.delete(self.CACHE_PREFIX, self.CATALOG_KEY)
