from __future__ import annotations

from fastapi import APIRouter, Depends

from packages.shared.schemas.store_v1 import Order
from services.storefront.app.routers.errors import raise_storefront_http_error
from services.storefront.app.services.storefront import Storefront, get_storefront

router = APIRouter()


@router.get("/v1/orders/{order_id}", response_model=Order)
async def get_order(order_id: str, storefront: Storefront = Depends(get_storefront)) -> Order:
    try:
        return await storefront.orders.load(order_id)
    except Exception as e:
        raise_storefront_http_error(e)
