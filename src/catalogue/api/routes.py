"""FastAPI endpoints for the Catalogue domain.

Reads are public; changes require the admin capability.
"""

from fastapi import APIRouter, Depends

from catalogue.api.schemas import CreateProductRequest, ProductResponse, StatusResponse, UpdateProductRequest
from catalogue.product.management import CreateProduct, DeleteProduct, ProductHandler, UpdateProduct
from identity.api.dependencies import get_store, require_admin
from shared.store import Store

product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("", response_model=list[ProductResponse])
def list_products(store: Store = Depends(get_store)) -> list[ProductResponse]:
    return [ProductResponse.model_validate(p) for p in ProductHandler(store).list_products()]


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, store: Store = Depends(get_store)) -> ProductResponse:
    return ProductResponse.model_validate(ProductHandler(store).get_product(product_id))


@product_router.post("", status_code=201, response_model=ProductResponse, dependencies=[Depends(require_admin)])
def create_product(body: CreateProductRequest, store: Store = Depends(get_store)) -> ProductResponse:
    command = CreateProduct(
        name=body.name,
        price=body.price,
        stock=body.stock,
        short_desc=body.short_desc,
        description=body.description,
        image=body.image,
    )
    return ProductResponse.model_validate(ProductHandler(store).create_product(command))


@product_router.put("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def update_product(product_id: str, body: UpdateProductRequest, store: Store = Depends(get_store)) -> ProductResponse:
    command = UpdateProduct(product_id=product_id, changes=body.model_dump(exclude_unset=True))
    return ProductResponse.model_validate(ProductHandler(store).update_product(command))


@product_router.delete("/{product_id}", response_model=StatusResponse, dependencies=[Depends(require_admin)])
def delete_product(product_id: str, store: Store = Depends(get_store)) -> StatusResponse:
    ProductHandler(store).delete_product(DeleteProduct(product_id=product_id))
    return StatusResponse(status="deleted")
