from __future__ import annotations

from typing import NoReturn

from fastapi import HTTPException

from services.storefront.app.services.cart_sync import CartValidationError
from services.storefront.app.services.checkout import CheckoutValidationError
from services.storefront.app.services.payment_poller import PaymentTimeoutError
from services.storefront.app.services.store_base import RemoteError


def raise_storefront_http_error(e: Exception) -> NoReturn:
    if isinstance(e, CheckoutValidationError):
        detail: object = str(e)
        if e.missing_fields:
            detail = {"message": str(e), "missing_fields": e.missing_fields}
        raise HTTPException(status_code=422, detail=detail) from e

    if isinstance(e, CartValidationError):
        raise HTTPException(status_code=422, detail=str(e)) from e

    if isinstance(e, PaymentTimeoutError):
        raise HTTPException(status_code=504, detail=str(e)) from e

    if isinstance(e, RemoteError):
        if e.is_not_found:
            raise HTTPException(status_code=404, detail=str(e)) from e
        raise HTTPException(status_code=502, detail=str(e)) from e

    raise HTTPException(status_code=500, detail="Internal Server Error") from e
