import asyncio
import logging
from typing import Dict

from dreampuff.exceptions import InsufficientStockError, SaveInProgressError, ValidationError
from dreampuff.models.history import SaleHistory
from dreampuff.services.ledger_service import StockLedger
from dreampuff.session.state import WorkSessionScope

logger = logging.getLogger(__name__)


class SaleDraft:
    """
    Quantities picked on the sale screen before they are saved.

    Stock is checked as each quantity is selected, so an oversell is
    refused interactively; the ledger repeats the check at commit time.
    ``saving`` is set while a commit is in flight and a second commit is
    refused until it finishes.
    """

    def __init__(self, scope: WorkSessionScope):
        self.scope = scope
        self.quantities: Dict[str, int] = {}
        self.saving = False

    def set_quantity(self, product, quantity: int) -> None:
        """Select ``quantity`` units of ``product`` (anything with id, name, stock)."""
        if quantity < 0:
            raise ValidationError("Quantity must not be negative")
        if quantity > product.stock:
            raise InsufficientStockError(product.name, product.stock, quantity)
        if quantity == 0:
            self.quantities.pop(product.id, None)
        else:
            self.quantities[product.id] = quantity

    def pending(self) -> Dict[str, int]:
        return {product_id: qty for product_id, qty in self.quantities.items() if qty > 0}

    def clear(self) -> None:
        self.quantities.clear()

    async def commit(self, ledger: StockLedger) -> SaleHistory:
        """Save the selection as one sale batch and reset the draft."""
        if self.saving:
            raise SaveInProgressError("A sale is already being saved")
        info = self.scope.require_active()
        pending = self.pending()
        if not pending:
            raise ValidationError("No items selected")

        self.saving = True
        try:
            entry = await asyncio.to_thread(ledger.record_sale, pending, info.snapshot())
        finally:
            self.saving = False

        self.clear()
        return entry
