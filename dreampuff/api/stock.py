from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Optional

from dreampuff.api.deps import require_api_key, to_http_exception
from dreampuff.database import get_db
from dreampuff.exceptions import DreampuffError
from dreampuff.services.ledger_service import StockLedger
from dreampuff.schemas.base import MessageResponse
from dreampuff.schemas.history import StockAddCreate, StockUpdateHistoryResponse
from dreampuff.schemas.product import (
    ProductCreate,
    ProductCreatedResponse,
    ProductResponse,
    ProductUpdate,
    StockBatchUpdate,
    StockUpdateByName,
)

router = APIRouter(
    prefix="/stock",
    tags=["Stock"],
    dependencies=[Depends(require_api_key)],
)


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List products with current stock",
    description="Get the product catalog. Filter by category, or by a name substring."
)
def list_stock(
    response: Response,
    name: Optional[str] = Query(None, description="Case-insensitive name substring"),
    category: Optional[str] = Query(None, description="Case-insensitive category"),
    db: Session = Depends(get_db)
):
    """Stock values must always be fresh, so the response is never cached downstream."""
    response.headers["Cache-Control"] = "no-store, max-age=0"
    return StockLedger(db).list_products(name=name, category=category)


@router.post(
    "",
    response_model=MessageResponse,
    summary="Set stock for several products",
    description="Atomic batch override of stock values. No history entry is written."
)
def set_stock(
    payload: StockBatchUpdate,
    db: Session = Depends(get_db)
):
    """
    Apply every `{id, stock}` pair or none of them.

    An unknown product ID aborts the whole batch with 404.
    """
    try:
        products = StockLedger(db).set_stock((u.id, u.stock) for u in payload.updates)
    except DreampuffError as e:
        raise to_http_exception(e)
    return MessageResponse(message=f"Stock updated successfully for {len(products)} product(s).")


@router.post(
    "/update-by-name",
    response_model=MessageResponse,
    summary="Set stock by product name",
    description="Case-insensitive exact name lookup, then a single stock override."
)
def update_stock_by_name(
    payload: StockUpdateByName,
    db: Session = Depends(get_db)
):
    try:
        product = StockLedger(db).set_stock_by_name(payload.name, payload.stock)
    except DreampuffError as e:
        raise to_http_exception(e)
    return MessageResponse(
        message=(
            f"Stock for \"{product.name}\" (ID: {product.id}) "
            f"updated successfully to {payload.stock}."
        )
    )


@router.put(
    "",
    response_model=ProductCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
    description="Create a product with zero stock and a placeholder image."
)
def create_product(
    payload: ProductCreate,
    db: Session = Depends(get_db)
):
    try:
        product = StockLedger(db).create_product(payload.name, payload.category)
    except DreampuffError as e:
        raise to_http_exception(e)
    return ProductCreatedResponse(
        message=f"Product \"{product.name}\" created successfully.",
        product=ProductResponse.model_validate(product),
    )


@router.patch(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Edit a product",
    description="Rename a product or replace its image. Only provided fields will be updated."
)
def update_product(
    product_id: str,
    payload: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Edit a product.

    Sending `"image": ""` restores the placeholder image. Cache is
    invalidated after the update.
    """
    try:
        return StockLedger(db).update_product(product_id, name=payload.name, image=payload.image)
    except DreampuffError as e:
        raise to_http_exception(e)


@router.delete(
    "/{product_id}",
    response_model=MessageResponse,
    summary="Delete a product"
)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db)
):
    try:
        StockLedger(db).delete_product(product_id)
    except DreampuffError as e:
        raise to_http_exception(e)
    return MessageResponse(message=f"Product with ID \"{product_id}\" deleted successfully.")


@router.post(
    "/reset",
    response_model=MessageResponse,
    summary="Reset all stock to zero"
)
def reset_stock(db: Session = Depends(get_db)):
    try:
        count = StockLedger(db).reset_all_stock()
    except DreampuffError as e:
        raise to_http_exception(e)
    return MessageResponse(message=f"Stock reset to 0 for {count} product(s).")


@router.post(
    "/add",
    response_model=StockUpdateHistoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add stock to a product",
    description="Increment one product's stock and record a stock-update history entry."
)
def add_stock(
    payload: StockAddCreate,
    db: Session = Depends(get_db)
):
    try:
        return StockLedger(db).add_stock(
            payload.product_id,
            payload.quantity,
            payload.session.model_dump(mode="json"),
        )
    except DreampuffError as e:
        raise to_http_exception(e)
