"""
Stock commands embedded in model output.

The workflow tool receives model replies of the form::

    calling tool_code print(updateStock(productId='abc123', amount=-2))
    Siap, 2 Puff Cokelat udah dicatat terjual ya!

The call carries the product ID and a signed amount; everything after it
is the reply shown to the user.
"""
import re
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from dreampuff.exceptions import ValidationError
from dreampuff.models.history import SaleHistory, StockUpdateHistory
from dreampuff.models.product import Product
from dreampuff.services.ledger_service import StockLedger

TOOL_CALL_RE = re.compile(
    r"calling\s+tool_code\s+print\(\s*updateStock\(\s*"
    r"productId\s*=\s*(?P<quote>['\"])(?P<product_id>.+?)(?P=quote)\s*,\s*"
    r"amount\s*=\s*(?P<amount>[+-]?\d+)\s*"
    r"\)\s*\)"
    r"(?P<reply>.*)",
    re.DOTALL,
)


@dataclass(frozen=True)
class StockCommand:
    product_id: str
    amount: int
    reply: str


def parse_tool_call(text: str) -> Optional[StockCommand]:
    """Extract the stock command from model output; None for plain replies."""
    match = TOOL_CALL_RE.search(text)
    if not match:
        return None
    return StockCommand(
        product_id=match.group("product_id"),
        amount=int(match.group("amount")),
        reply=match.group("reply").strip(),
    )


def apply_stock_command(
    ledger: StockLedger,
    command: StockCommand,
    session: dict,
) -> Tuple[Product, Union[SaleHistory, StockUpdateHistory]]:
    """
    Apply a parsed command through the ledger.

    A positive amount is a stock addition, a negative amount a sale of that
    many units. Returns the product and the history entry written.
    """
    if command.amount > 0:
        entry = ledger.add_stock(command.product_id, command.amount, session)
    elif command.amount < 0:
        entry = ledger.record_sale({command.product_id: -command.amount}, session)
    else:
        raise ValidationError("Stock command amount must not be zero")
    return ledger.get_product(command.product_id), entry
