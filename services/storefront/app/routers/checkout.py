from __future__ import annotations

from fastapi import APIRouter, Depends

from packages.shared.schemas.notification_v1 import NotificationV1
from services.storefront.app.models.checkout import CheckoutRequest, CheckoutResponse
from services.storefront.app.routers.errors import raise_storefront_http_error
from services.storefront.app.services.storefront import Storefront, get_storefront

router = APIRouter()


@router.post("/v1/checkout", response_model=CheckoutResponse)
async def run_checkout(
    payload: CheckoutRequest, storefront: Storefront = Depends(get_storefront)
) -> CheckoutResponse:
    cart_id = storefront.session.cart_id
    try:
        if cart_id and storefront.cart.state is None:
            await storefront.cart.load(cart_id)
        order_id = await storefront.checkout.run_checkout(cart_id, payload.guest_contact)
    except Exception as e:
        raise_storefront_http_error(e)

    return CheckoutResponse(order_id=order_id, redirect_to=storefront.navigator.current)


@router.get("/v1/notifications", response_model=list[NotificationV1])
def drain_notifications(storefront: Storefront = Depends(get_storefront)) -> list[NotificationV1]:
    return storefront.notifier.drain()
