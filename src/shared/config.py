"""Application configuration read from environment variables."""

import os
from dataclasses import dataclass
from decimal import Decimal

# Thirty days, matching the lifetime of tokens issued at login
DEFAULT_TOKEN_TTL_SECONDS = 30 * 24 * 60 * 60


def get_environment() -> str:
    """Return the active environment name (development, test, staging, production)."""
    return (os.getenv("STOREFRONT_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


@dataclass(frozen=True)
class Config:
    environment: str = "development"
    database_url: str = "sqlite:///storefront.db"
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    tax_rate: Decimal = Decimal("0.18")
    free_shipping_threshold: Decimal = Decimal("500")
    flat_shipping_fee: Decimal = Decimal("100")

    @classmethod
    def from_env(cls) -> "Config":
        return cls(
            environment=get_environment(),
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            jwt_secret=os.getenv("JWT_SECRET", cls.jwt_secret),
            token_ttl_seconds=int(os.getenv("TOKEN_TTL_SECONDS", str(DEFAULT_TOKEN_TTL_SECONDS))),
            tax_rate=Decimal(os.getenv("TAX_RATE", str(cls.tax_rate))),
            free_shipping_threshold=Decimal(os.getenv("FREE_SHIPPING_THRESHOLD", str(cls.free_shipping_threshold))),
            flat_shipping_fee=Decimal(os.getenv("FLAT_SHIPPING_FEE", str(cls.flat_shipping_fee))),
        )
