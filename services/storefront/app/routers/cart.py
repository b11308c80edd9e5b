from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from packages.shared.schemas.store_v1 import CartState
from services.storefront.app.models.cart import AddLineRequest, SetLineQuantityRequest
from services.storefront.app.routers.errors import raise_storefront_http_error
from services.storefront.app.services.storefront import Storefront, get_storefront

router = APIRouter()


@router.get("/v1/cart", response_model=CartState)
async def get_cart(storefront: Storefront = Depends(get_storefront)) -> CartState:
    try:
        cart_id = await storefront.identity.resolve_cart_id()
        return storefront.cart.state or await storefront.cart.load(cart_id)
    except Exception as e:
        raise_storefront_http_error(e)


@router.post("/v1/cart/lines", response_model=CartState)
async def add_line(
    payload: AddLineRequest, storefront: Storefront = Depends(get_storefront)
) -> CartState:
    try:
        return await storefront.cart.add_line(payload.sku, payload.qty)
    except Exception as e:
        raise_storefront_http_error(e)


@router.patch("/v1/cart/lines", response_model=CartState)
async def set_line_quantity(
    payload: SetLineQuantityRequest, storefront: Storefront = Depends(get_storefront)
) -> CartState | Response:
    try:
        cart = await storefront.cart.set_line_quantity(payload.sku, payload.qty)
    except Exception as e:
        raise_storefront_http_error(e)

    if cart is None:
        return Response(status_code=204)
    return cart
