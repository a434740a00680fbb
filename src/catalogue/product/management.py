"""Product management — back-office commands and handler."""

from dataclasses import dataclass, field
from decimal import Decimal

import structlog
from sqlalchemy import delete

from catalogue.product.product import Product
from catalogue.product.repository import get_product, list_products
from ordering.cart.cart import CartLine
from shared.store import Store

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CreateProduct:
    name: str
    price: Decimal
    stock: int
    short_desc: str | None = None
    description: str | None = None
    image: str | None = None


@dataclass(frozen=True)
class UpdateProduct:
    """Only the keys present in ``changes`` are applied."""

    product_id: str
    changes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteProduct:
    product_id: str


class ProductHandler:
    def __init__(self, store: Store):
        self.store = store

    def list_products(self) -> list[Product]:
        with self.store.session() as session:
            return list_products(session)

    def get_product(self, product_id: str) -> Product:
        with self.store.session() as session:
            return get_product(session, product_id)

    def create_product(self, command: CreateProduct) -> Product:
        product = Product.create(
            name=command.name,
            price=command.price,
            stock=command.stock,
            short_desc=command.short_desc,
            description=command.description,
            image=command.image,
        )
        with self.store.unit_of_work() as session:
            session.add(product)

        logger.info("product_created", product_id=product.id, price=str(product.price), stock=product.stock)
        return product

    def update_product(self, command: UpdateProduct) -> Product:
        allowed = ("name", "price", "stock", "short_desc", "description", "image")
        changes = {k: v for k, v in command.changes.items() if k in allowed}

        with self.store.unit_of_work() as session:
            product = get_product(session, command.product_id)
            product.update_details(**changes)

        logger.info("product_updated", product_id=command.product_id, fields=sorted(changes))
        return product

    def delete_product(self, command: DeleteProduct) -> None:
        with self.store.unit_of_work() as session:
            product = get_product(session, command.product_id)
            # Order lines keep their own snapshot; only live cart lines reference the product
            session.execute(delete(CartLine).where(CartLine.product_id == product.id))
            session.delete(product)

        logger.info("product_deleted", product_id=command.product_id)
