from typing import Optional

from pydantic import BaseModel, Field, StrictInt, StrictStr

from dreampuff.models.product import ProductCategory
from dreampuff.schemas.base import CamelModel


class ProductResponse(CamelModel):
    """Schema for product response."""
    id: str
    name: str
    stock: int
    image: str
    category: ProductCategory


class ProductCreate(BaseModel):
    """Schema for creating a new product. Stock always starts at zero."""
    name: StrictStr = Field(..., min_length=1, max_length=255, description="Product name")
    category: ProductCategory = Field(..., description="Catalog category")


class ProductCreatedResponse(BaseModel):
    message: str
    product: ProductResponse


class StockSetItem(BaseModel):
    """One administrative stock override."""
    id: StrictStr = Field(..., min_length=1, description="Product ID")
    stock: StrictInt = Field(..., ge=0, description="New stock value")


class StockBatchUpdate(BaseModel):
    """Schema for an atomic batch of stock overrides."""
    updates: list[StockSetItem] = Field(..., min_length=1)


class StockUpdateByName(BaseModel):
    """Schema for setting stock through a case-insensitive name lookup."""
    name: StrictStr = Field(..., min_length=1, description="Product name")
    stock: StrictInt = Field(..., ge=0, description="New stock value")


class ProductUpdate(BaseModel):
    """Schema for editing a product. Only provided fields are updated."""
    name: Optional[StrictStr] = Field(None, min_length=1, max_length=255, description="New product name")
    image: Optional[StrictStr] = Field(
        None,
        max_length=1024,
        description="New image URL; an empty string restores the placeholder",
    )
