import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from dreampuff.api.deps import require_api_key, to_http_exception
from dreampuff.assistant.client import PromptServiceClient
from dreampuff.assistant.intent import NO_PRODUCTS_REPLY, build_response_input
from dreampuff.assistant.schemas import (
    ChatRequest,
    ChatResponse,
    StockCommandRequest,
    StockCommandResponse,
)
from dreampuff.assistant.tool_calls import apply_stock_command, parse_tool_call
from dreampuff.database import get_db
from dreampuff.exceptions import DreampuffError, TransportError
from dreampuff.schemas.product import ProductResponse
from dreampuff.services.ledger_service import StockLedger

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["Assistant"],
    dependencies=[Depends(require_api_key)],
)


def get_prompt_client():
    """Prompt service client dependency."""
    client = PromptServiceClient()
    try:
        yield client
    finally:
        client.close()


@router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Ask the stock assistant",
    description="Answer a free-text stock question through the prompt service."
)
def chat(
    payload: ChatRequest,
    db: Session = Depends(get_db),
    prompt_client: PromptServiceClient = Depends(get_prompt_client)
):
    products = StockLedger(db).list_products()
    if not products:
        return ChatResponse(reply=NO_PRODUCTS_REPLY, type="unknown")

    response_input = build_response_input(payload.message, products)
    try:
        output = prompt_client.create_response(response_input)
    except TransportError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

    return ChatResponse(reply=output.response, type=response_input.type)


@router.post(
    "/webhook/stock-command",
    response_model=StockCommandResponse,
    summary="Apply a stock command from the workflow tool",
    description="""
    Receive raw model output. When it carries an `updateStock` tool call the
    command is applied (positive amount adds stock, negative records a sale);
    otherwise the text is passed back unchanged.
    """
)
def stock_command(
    payload: StockCommandRequest,
    db: Session = Depends(get_db)
):
    command = parse_tool_call(payload.output)
    if command is None:
        return StockCommandResponse(reply=payload.output.strip(), applied=False)

    try:
        product, _ = apply_stock_command(
            StockLedger(db),
            command,
            payload.session.model_dump(mode="json"),
        )
    except DreampuffError as e:
        raise to_http_exception(e)

    logger.info(f"Stock command applied to {product.name}: {command.amount:+d}")
    return StockCommandResponse(
        reply=command.reply,
        applied=True,
        product=ProductResponse.model_validate(product),
    )
