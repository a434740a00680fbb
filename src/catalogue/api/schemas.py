"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

# --- Product Request Schemas ---


class CreateProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Handloom Cotton Saree",
                    "price": "1499.00",
                    "stock": 25,
                    "short_desc": "Soft handloom cotton, natural dyes.",
                    "description": "Six yards of breathable handloom cotton with a contrast border.",
                    "image": "/images/products/cotton-saree.jpg",
                }
            ]
        }
    }

    name: str = Field(..., max_length=200)
    price: Decimal = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    short_desc: str | None = Field(None, max_length=500)
    description: str | None = None
    image: str | None = Field(None, max_length=500)


class UpdateProductRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"price": "1299.00", "stock": 40}]}}

    name: str | None = Field(None, max_length=200)
    price: Decimal | None = Field(None, ge=0)
    stock: int | None = Field(None, ge=0)
    short_desc: str | None = Field(None, max_length=500)
    description: str | None = None
    image: str | None = Field(None, max_length=500)


# --- Response Schemas ---


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    price: Decimal
    stock: int
    short_desc: str | None = None
    description: str | None = None
    image: str | None = None
    created_at: datetime
    updated_at: datetime


class StatusResponse(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "ok"}]}}

    status: str = "ok"
