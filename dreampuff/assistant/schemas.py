from typing import Literal, Optional

from pydantic import BaseModel, Field

from dreampuff.schemas.base import CamelModel
from dreampuff.schemas.product import ProductResponse
from dreampuff.schemas.session import SessionSnapshot

ResponseType = Literal["category", "product", "not_found", "error", "unknown"]


class ProductStock(BaseModel):
    name: str = Field(..., description="The name of the product.")
    stock: int = Field(..., description="The available stock quantity.")


class CreateResponseInput(CamelModel):
    """Structured payload sent to the prompt-execution service."""
    type: ResponseType = Field(..., description="The type of information being presented.")
    entity_name: str = Field(..., description="The category or product being asked about.")
    products: list[ProductStock] = Field(default_factory=list)


class CreateResponseOutput(BaseModel):
    response: str = Field(..., description="The generated, friendly response text.")


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


class ChatResponse(BaseModel):
    reply: str
    type: ResponseType


class StockCommandRequest(BaseModel):
    """Raw model output forwarded by the workflow tool."""
    output: str = Field(..., min_length=1)
    session: SessionSnapshot


class StockCommandResponse(BaseModel):
    reply: str
    applied: bool
    product: Optional[ProductResponse] = None
