"""Pydantic request schemas for the storefront API.

The order placement payload is not modelled here; it is checked by
``storefront.checkout.validation``, which owns its error messages and
field paths.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

# --- Catalogue ---


class ProductImageIn(BaseModel):
    public_id: str = Field(..., max_length=255)
    url: str = Field(..., max_length=500)


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ceramic Pour-Over Kettle",
                    "description": "1 litre gooseneck kettle with a matte glaze.",
                    "price": 49.9,
                    "stock": 25,
                    "category_id": "0b4a6a9e-6c1e-4e84-9d8f-5b0f1f3c2a11",
                    "images": [{"public_id": "kettle-01", "url": "https://img.example.com/kettle-01.jpg"}],
                }
            ]
        }
    }

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=2000)
    price: float = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    category_id: str
    images: list[ProductImageIn] = Field(default_factory=list)


class UpdateProductRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, min_length=1, max_length=2000)
    price: float | None = Field(None, ge=0)
    category_id: str | None = None


class RestockProductRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class CreateCategoryRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)


# --- Cart ---


class AddToCartRequest(BaseModel):
    model_config = {"populate_by_name": True}

    product_id: str = Field(..., alias="productId", min_length=1)
    quantity: int = Field(1, ge=1)


class CartAction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


class CartEntryRef(BaseModel):
    id: str = Field(..., min_length=1)


class UpdateCartRequest(BaseModel):
    product: CartEntryRef
    value: CartAction
