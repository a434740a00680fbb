"""Catalog store — product reads and the atomic stock counter operations.

Stock changes made on behalf of orders are single conditional UPDATE
statements, never a read followed by a write, so concurrent checkouts
against the same product are serialized by the database.
"""

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from catalogue.product.product import Product
from shared.exceptions import NotFound, OutOfStock


def get_product(session: Session, product_id: str) -> Product:
    product = session.get(Product, product_id)
    if product is None:
        raise NotFound("Product not found", details={"product_id": product_id})
    return product


def list_products(session: Session) -> list[Product]:
    return list(session.scalars(select(Product).order_by(Product.created_at.desc())))


def decrement_stock(session: Session, product_id: str, quantity: int) -> None:
    """Take ``quantity`` units out of stock, only if that many are available.

    Raises OutOfStock when the guarded update matches no row. The caller's
    transaction is expected to roll back in that case.
    """
    result = session.execute(
        update(Product)
        .where(Product.id == product_id, Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise OutOfStock(product_id=product_id, requested=quantity)


def restock(session: Session, product_id: str, quantity: int) -> bool:
    """Return ``quantity`` units to stock. False when the product no longer exists."""
    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .values(stock=Product.stock + quantity)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
