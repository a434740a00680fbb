"""Pydantic request/response schemas for the Ordering API.

These are external contracts, kept separate from the internal commands.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingSchema(BaseModel):
    name: str = Field(..., max_length=100)
    email: str | None = Field(None, max_length=254)
    phone: str = Field(..., max_length=20)
    address: str = Field(..., max_length=500)
    city: str = Field(..., max_length=100)
    state: str | None = Field(None, max_length=100)
    postal_code: str = Field(..., max_length=20)


class PriceSummarySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    new_quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping: ShippingSchema
    payment_method: str = "card"
    payment_reference: str | None = Field(None, max_length=100)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping": {
                        "name": "Jane Doe",
                        "email": "jane.doe@example.com",
                        "phone": "+91 98765 43210",
                        "address": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "KA",
                        "postal_code": "560001",
                    },
                    "payment_method": "card",
                    "payment_reference": None,
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "processing"}]}}


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class CartLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    quantity: int


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    stock: int
    line_total: Decimal


class CartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    lines: list[CartItemResponse]
    summary: PriceSummarySchema


class OrderLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    name: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    status: str
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    shipping_name: str
    shipping_email: str | None = None
    shipping_phone: str
    shipping_address: str
    shipping_city: str
    shipping_state: str | None = None
    shipping_postal_code: str
    payment_method: str
    payment_reference: str | None = None
    created_at: datetime
    lines: list[OrderLineResponse]


class StatusResponse(BaseModel):
    status: str = "ok"


class ClearCartResponse(BaseModel):
    status: str = "cleared"
    lines_removed: int
