from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from packages.shared.schemas.store_v1 import ProductFilters, ProductFull, ProductSlim
from services.storefront.app.routers.errors import raise_storefront_http_error
from services.storefront.app.services.storefront import Storefront, get_storefront

router = APIRouter()


@router.get("/v1/products", response_model=list[ProductSlim])
async def list_products(
    search: str | None = None,
    category: str | None = None,
    min_price: float | None = Query(None, alias="minPrice"),
    max_price: float | None = Query(None, alias="maxPrice"),
    page: int | None = None,
    page_size: int | None = Query(None, alias="pageSize"),
    storefront: Storefront = Depends(get_storefront),
) -> list[ProductSlim]:
    filters = ProductFilters(
        search=search,
        category=category,
        min_price=min_price,
        max_price=max_price,
        page=page,
        page_size=page_size,
    )
    try:
        return await storefront.client.list_products(filters)
    except Exception as e:
        raise_storefront_http_error(e)


@router.get("/v1/products/{sku}", response_model=ProductFull)
async def get_product(sku: str, storefront: Storefront = Depends(get_storefront)) -> ProductFull:
    try:
        return await storefront.client.get_product(sku)
    except Exception as e:
        raise_storefront_http_error(e)
