"""Tests for the stock ledger: sales, additions and batch atomicity."""
import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from dreampuff.exceptions import (
    InsufficientStockError,
    NotFoundError,
    SaveInProgressError,
    TransportError,
    ValidationError,
    AuthenticationError,
)
from dreampuff.models.history import SaleHistory, StockUpdateHistory
from dreampuff.models.product import Product, ProductCategory
from dreampuff.models.session_record import Position
from dreampuff.services.ledger_service import StockLedger
from dreampuff.services.sale_draft import SaleDraft
from dreampuff.session.state import SessionInfo, WorkSessionScope

SESSION = {"name": "Sari", "position": "Kasir"}


def add_product(db, product_id, stock, name=None):
    product = Product(
        id=product_id,
        name=name or f"Product {product_id}",
        stock=stock,
        category=ProductCategory.CREAMPUFF,
    )
    db.add(product)
    db.commit()
    return product


def stock_of(db, product_id):
    db.expire_all()
    return db.query(Product).filter(Product.id == product_id).one().stock


def test_record_sale_decrements_and_logs(db_session):
    """Test a sale decrements stock and writes one history entry."""
    add_product(db_session, "p1", 50)

    entry = StockLedger(db_session).record_sale({"p1": 5}, SESSION)

    assert stock_of(db_session, "p1") == 45
    assert entry.total_items == 5
    assert entry.items[0]["productId"] == "p1"
    assert entry.items[0]["quantity"] == 5
    assert entry.session == SESSION
    assert db_session.query(SaleHistory).count() == 1


def test_record_sale_ignores_zero_quantities(db_session):
    """Test zero entries are dropped from the batch."""
    add_product(db_session, "p1", 5)
    add_product(db_session, "p2", 5)

    entry = StockLedger(db_session).record_sale({"p1": 2, "p2": 0}, SESSION)

    assert [item["productId"] for item in entry.items] == ["p1"]
    assert stock_of(db_session, "p2") == 5


def test_record_sale_rejects_empty_and_negative(db_session):
    """Test empty batches and negative quantities are validation errors."""
    add_product(db_session, "p1", 5)
    ledger = StockLedger(db_session)

    with pytest.raises(ValidationError):
        ledger.record_sale({}, SESSION)
    with pytest.raises(ValidationError):
        ledger.record_sale({"p1": 0}, SESSION)
    with pytest.raises(ValidationError):
        ledger.record_sale({"p1": -1}, SESSION)
    assert stock_of(db_session, "p1") == 5


def test_record_sale_insufficient_stock_changes_nothing(db_session):
    """Test one oversold product aborts the whole batch."""
    add_product(db_session, "p1", 10)
    add_product(db_session, "p2", 1, name="Puff Cokelat")

    with pytest.raises(InsufficientStockError) as exc_info:
        StockLedger(db_session).record_sale({"p1": 3, "p2": 2}, SESSION)

    assert exc_info.value.available == 1
    assert exc_info.value.requested == 2
    assert "Puff Cokelat" in str(exc_info.value)
    assert stock_of(db_session, "p1") == 10
    assert stock_of(db_session, "p2") == 1
    assert db_session.query(SaleHistory).count() == 0


def test_record_sale_unknown_product(db_session):
    """Test unknown product IDs abort the batch."""
    add_product(db_session, "p1", 10)

    with pytest.raises(NotFoundError):
        StockLedger(db_session).record_sale({"p1": 1, "ghost": 1}, SESSION)

    assert stock_of(db_session, "p1") == 10


def test_record_sale_can_sell_out(db_session):
    """Test selling exactly the remaining stock reaches zero."""
    add_product(db_session, "p1", 3)

    StockLedger(db_session).record_sale({"p1": 3}, SESSION)

    assert stock_of(db_session, "p1") == 0


def test_record_sale_history_write_failure_rolls_back(db_session):
    """Test a failed history insert leaves every product untouched."""
    add_product(db_session, "p1", 10)
    add_product(db_session, "p2", 10)

    def fail_insert(mapper, connection, target):
        raise OperationalError("INSERT INTO sales_history", {}, Exception("disk I/O error"))

    event.listen(SaleHistory, "before_insert", fail_insert)
    try:
        with pytest.raises(TransportError):
            StockLedger(db_session).record_sale({"p1": 4, "p2": 2}, SESSION)
    finally:
        event.remove(SaleHistory, "before_insert", fail_insert)

    assert stock_of(db_session, "p1") == 10
    assert stock_of(db_session, "p2") == 10
    assert db_session.query(SaleHistory).count() == 0


def test_add_stock(db_session):
    """Test stock addition increments and records stockAfter."""
    add_product(db_session, "p1", 4, name="Puff Vanila")

    entry = StockLedger(db_session).add_stock("p1", 6, SESSION)

    assert stock_of(db_session, "p1") == 10
    assert entry.quantity_added == 6
    assert entry.stock_after == 10
    assert entry.product == {"id": "p1", "name": "Puff Vanila", "image": entry.product["image"]}
    assert db_session.query(StockUpdateHistory).count() == 1


def test_add_stock_validation(db_session):
    """Test non-positive additions and unknown products."""
    add_product(db_session, "p1", 4)
    ledger = StockLedger(db_session)

    with pytest.raises(ValidationError):
        ledger.add_stock("p1", 0, SESSION)
    with pytest.raises(NotFoundError):
        ledger.add_stock("ghost", 1, SESSION)
    assert db_session.query(StockUpdateHistory).count() == 0


def test_set_stock_writes_no_history(db_session):
    """Test direct stock sets do not produce history."""
    add_product(db_session, "p1", 4)

    StockLedger(db_session).set_stock([("p1", 12)])

    assert stock_of(db_session, "p1") == 12
    assert db_session.query(StockUpdateHistory).count() == 0
    assert db_session.query(SaleHistory).count() == 0


def test_set_stock_negative_violates_constraint(db_session):
    """Test the database refuses negative stock even on direct sets."""
    add_product(db_session, "p1", 4)

    with pytest.raises(TransportError):
        StockLedger(db_session).set_stock([("p1", -1)])

    assert stock_of(db_session, "p1") == 4


def test_reset_all_stock(db_session):
    """Test resetting stock returns the number of products touched."""
    add_product(db_session, "p1", 4)
    add_product(db_session, "p2", 9)

    assert StockLedger(db_session).reset_all_stock() == 2
    assert stock_of(db_session, "p1") == 0
    assert stock_of(db_session, "p2") == 0


# ----------------------------------------------------------------------
# SaleDraft
# ----------------------------------------------------------------------


def active_scope():
    scope = WorkSessionScope()
    scope.activate(SessionInfo(name="Sari", position=Position.KASIR))
    return scope


def test_draft_rejects_quantity_above_stock(db_session):
    """Test the selection refuses more than the current stock."""
    product = add_product(db_session, "p1", 2)
    draft = SaleDraft(active_scope())

    with pytest.raises(InsufficientStockError):
        draft.set_quantity(product, 3)

    draft.set_quantity(product, 2)
    assert draft.pending() == {"p1": 2}
    draft.set_quantity(product, 0)
    assert draft.pending() == {}


def test_draft_commit(db_session):
    """Test committing a draft records one sale and clears the selection."""
    product = add_product(db_session, "p1", 5)
    draft = SaleDraft(active_scope())
    draft.set_quantity(product, 2)

    entry = asyncio.run(draft.commit(StockLedger(db_session)))

    assert entry.total_items == 2
    assert entry.session == {"name": "Sari", "position": "Kasir"}
    assert draft.pending() == {}
    assert draft.saving is False
    assert stock_of(db_session, "p1") == 3


def test_draft_commit_rejected_while_saving(db_session):
    """Test a second commit is refused while one is in flight."""
    product = add_product(db_session, "p1", 5)
    draft = SaleDraft(active_scope())
    draft.set_quantity(product, 1)
    draft.saving = True

    with pytest.raises(SaveInProgressError):
        asyncio.run(draft.commit(StockLedger(db_session)))

    assert stock_of(db_session, "p1") == 5


def test_draft_commit_requires_active_session(db_session):
    """Test no sale is recorded without an active work session."""
    product = add_product(db_session, "p1", 5)
    draft = SaleDraft(WorkSessionScope())
    draft.set_quantity(product, 1)

    with pytest.raises(AuthenticationError):
        asyncio.run(draft.commit(StockLedger(db_session)))

    assert stock_of(db_session, "p1") == 5


def test_update_product_invalidates_catalog_cache(db_session):
    """Test editing a product drops the cached catalog."""
    add_product(db_session, "p1", 4, name="Puff Cokelat")

    with patch("dreampuff.services.ledger_service.cache_service") as mock_cache:
        product = StockLedger(db_session).update_product("p1", name=" Puff Lumer ")

    assert product.name == "Puff Lumer"
    mock_cache.delete.assert_called_once_with("products", "all")


def test_update_product_unknown_or_blank(db_session):
    """Test unknown products and blank names are refused."""
    add_product(db_session, "p1", 4, name="Puff Cokelat")
    ledger = StockLedger(db_session)

    with pytest.raises(NotFoundError):
        ledger.update_product("ghost", name="X")
    with pytest.raises(ValidationError):
        ledger.update_product("p1", name="  ")
    db_session.expire_all()
    assert ledger.get_product("p1").name == "Puff Cokelat"


def test_list_products_ignores_case_when_ordering(db_session):
    """Test the catalog is ordered by name regardless of case."""
    add_product(db_session, "p1", 1, name="Puff Cokelat")
    add_product(db_session, "p2", 1, name="baby puff")
    add_product(db_session, "p3", 1, name="Cheesecake")

    names = [p["name"] for p in StockLedger(db_session).list_products()]

    assert names == ["baby puff", "Cheesecake", "Puff Cokelat"]
