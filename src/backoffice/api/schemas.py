"""Pydantic response schemas for the back-office API."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class StatsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_products: int
    total_orders: int
    total_users: int
    total_revenue: Decimal
