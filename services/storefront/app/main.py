"""Storefront service entrypoint.

A thin JSON API a renderer calls into; the cart and checkout logic lives in
`services.storefront.app.services`.
"""

from fastapi import FastAPI

from services.storefront.app.db.init_db import init_db
from services.storefront.app.routers.cart import router as cart_router
from services.storefront.app.routers.checkout import router as checkout_router
from services.storefront.app.routers.order import router as order_router
from services.storefront.app.routers.products import router as products_router
from services.storefront.app.services.storefront import close_storefront
from services.storefront.app.utils.logging import configure_logging

app = FastAPI(title="Storefront API")

app.include_router(products_router)
app.include_router(cart_router)
app.include_router(checkout_router)
app.include_router(order_router)


@app.on_event("startup")
def _startup() -> None:
    configure_logging()
    init_db()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await close_storefront()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
