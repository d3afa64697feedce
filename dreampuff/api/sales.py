from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from dreampuff.api.deps import require_api_key, to_http_exception
from dreampuff.database import get_db
from dreampuff.exceptions import DreampuffError
from dreampuff.services.history_service import HistoryService
from dreampuff.services.ledger_service import StockLedger
from dreampuff.schemas.history import SaleCreate, SaleHistoryResponse

router = APIRouter(
    prefix="/sales",
    tags=["Sales"],
    dependencies=[Depends(require_api_key)],
)


@router.post(
    "",
    response_model=SaleHistoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record a sale",
    description="""
    Decrement stock for every product in the batch and write one sale history entry.

    **Race Condition Handling:**
    Product rows are locked with SELECT FOR UPDATE, so concurrent sales of
    the last units cannot drive stock below zero.

    The batch is all-or-nothing: if any product is missing or short on
    stock, no stock changes and no history entry is written.
    """
)
def create_sale(
    payload: SaleCreate,
    db: Session = Depends(get_db)
):
    """
    Record a sale batch.

    - **items**: Quantity sold per product ID (zero entries are ignored)
    - **session**: Who records the sale
    """
    try:
        return StockLedger(db).record_sale(
            payload.items,
            payload.session.model_dump(mode="json"),
        )
    except DreampuffError as e:
        raise to_http_exception(e)


@router.get(
    "",
    response_model=list[SaleHistoryResponse],
    summary="List recent sales",
    description="Get the latest sale history entries, newest first."
)
def list_sales(
    limit: int = Query(20, ge=1, le=100, description="Max entries to return"),
    db: Session = Depends(get_db)
):
    return HistoryService(db).recent_sales(limit=limit)
