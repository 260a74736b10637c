"""Product CRUD endpoints."""

from fastapi import APIRouter, HTTPException, Request, Response
from starlette import status

from core.ratelimit import READ_LIMIT, WRITE_LIMIT, limiter
from core.wide_event import set_wide_event_fields
from schemas import ProductRequest, ProductResponse
from services.products_service import ProductServiceDep

router = APIRouter(prefix="/api/products", tags=["products"])

_NOT_FOUND = {404: {"description": "Product not found"}}


@router.get("", response_model=list[ProductResponse])
@limiter.limit(READ_LIMIT)
async def list_products(
    request: Request, service: ProductServiceDep
) -> list[ProductResponse]:
    """List all products."""
    products = await service.get_all_products()
    return [ProductResponse.model_validate(p) for p in products]


@router.get("/{product_id}", response_model=ProductResponse, responses=_NOT_FOUND)
@limiter.limit(READ_LIMIT)
async def get_product(
    request: Request, product_id: int, service: ProductServiceDep
) -> ProductResponse:
    """Get a product by ID."""
    product = await service.get_product_by_id(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return ProductResponse.model_validate(product)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(WRITE_LIMIT)
async def create_product(
    request: Request, body: ProductRequest, service: ProductServiceDep
) -> ProductResponse:
    """Save a product. A body ``id`` of a stored product updates it."""
    product = await service.save_product(body.to_model())
    set_wide_event_fields(product_id=product.id, product_action="save")
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse, responses=_NOT_FOUND)
@limiter.limit(WRITE_LIMIT)
async def update_product(
    request: Request,
    product_id: int,
    body: ProductRequest,
    service: ProductServiceDep,
) -> ProductResponse:
    """Replace every field of the product stored under the path ID."""
    if await service.get_product_by_id(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    product = await service.save_product(body.to_model(product_id))
    set_wide_event_fields(product_id=product.id, product_action="save")
    return ProductResponse.model_validate(product)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_NOT_FOUND,
)
@limiter.limit(WRITE_LIMIT)
async def delete_product(
    request: Request, product_id: int, service: ProductServiceDep
) -> Response:
    """Delete a product by ID."""
    if await service.get_product_by_id(product_id) is None:
        raise HTTPException(status_code=404, detail="Product not found")
    await service.delete_by_id(product_id)
    set_wide_event_fields(product_id=product_id, product_action="delete")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
