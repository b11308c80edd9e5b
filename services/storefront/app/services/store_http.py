from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
import structlog
from pydantic import BaseModel, ValidationError

from packages.shared.schemas.store_v1 import (
    CartState,
    CreateOrderRequest,
    GuestContact,
    LineMutation,
    Order,
    Payment,
    ProductFilters,
    ProductFull,
    ProductSlim,
    StartPaymentRequest,
    TechnicalIdResponse,
)
from services.storefront.app.services.store_base import RemoteError

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True, slots=True)
class _HttpConfig:
    base_url: str
    timeout_s: float


def _segment(value: str) -> str:
    return quote(value, safe="")


class HttpStoreClient:
    """Store client talking to the real backend over HTTP/JSON.

    Env vars:
    - STOREFRONT_STORE_CLIENT=http
    - STOREFRONT_API_BASE (default: http://localhost:8080)
    - STOREFRONT_HTTP_TIMEOUT_S (default: 10)
    """

    backend = "HTTP"

    def __init__(
        self,
        cfg: _HttpConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cfg = cfg
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_env(cls) -> "HttpStoreClient":
        base_url = os.getenv("STOREFRONT_API_BASE", "http://localhost:8080").rstrip("/")
        timeout_s = float(os.getenv("STOREFRONT_HTTP_TIMEOUT_S", "10"))
        return cls(_HttpConfig(base_url=base_url, timeout_s=timeout_s))

    @property
    def base_url(self) -> str:
        return self._cfg.base_url

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._cfg.base_url,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self._cfg.timeout_s),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        try:
            response = await self._http().request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            logger.warning("Store request failed", method=method, path=path, error=str(e))
            raise RemoteError(f"Network error: {type(e).__name__}: {e}") from e

        if not response.is_success:
            logger.info(
                "Store request rejected",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise RemoteError.from_status(response.status_code, response.reason_phrase)

        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(
                f"API Error: invalid JSON from {method} {path}", status_code=response.status_code
            ) from e

    async def _technical_id(self, method: str, path: str, body: dict[str, Any] | None) -> str:
        data = await self._request(method, path, json=body)
        return _parse(TechnicalIdResponse, data).technical_id

    async def list_products(self, filters: ProductFilters | None = None) -> list[ProductSlim]:
        params = filters.to_query() if filters is not None else None
        data = await self._request("GET", "/ui/products", params=params or None)
        return [_parse(ProductSlim, row) for row in data]

    async def get_product(self, sku: str) -> ProductFull:
        data = await self._request("GET", f"/ui/products/{_segment(sku)}")
        return _parse(ProductFull, data)

    async def create_or_return_cart(self) -> str:
        return await self._technical_id("POST", "/ui/cart", {"action": "createOrReturn"})

    async def get_cart(self, cart_id: str) -> CartState:
        data = await self._request("GET", f"/ui/cart/{_segment(cart_id)}")
        return _parse(CartState, data)

    async def add_line(self, cart_id: str, sku: str, qty: int) -> str:
        body = LineMutation(sku=sku, qty=qty).to_wire()
        return await self._technical_id("POST", f"/ui/cart/{_segment(cart_id)}/lines", body)

    async def update_line(self, cart_id: str, sku: str, qty: int) -> str:
        body = LineMutation(sku=sku, qty=qty).to_wire()
        return await self._technical_id("PATCH", f"/ui/cart/{_segment(cart_id)}/lines", body)

    async def open_checkout(self, cart_id: str) -> str:
        return await self._technical_id(
            "POST", f"/ui/cart/{_segment(cart_id)}/open-checkout", None
        )

    async def submit_contact(self, cart_id: str, guest_contact: GuestContact) -> str:
        body = {"guestContact": guest_contact.to_wire()}
        return await self._technical_id("POST", f"/ui/checkout/{_segment(cart_id)}", body)

    async def start_payment(self, cart_id: str, amount: float | None) -> str:
        body = StartPaymentRequest(cart_id=cart_id, amount=amount).to_wire()
        return await self._technical_id("POST", "/ui/payment/start", body)

    async def get_payment(self, payment_id: str) -> Payment:
        data = await self._request("GET", f"/ui/payment/{_segment(payment_id)}")
        return _parse(Payment, data)

    async def create_order(self, payment_id: str, cart_id: str) -> str:
        body = CreateOrderRequest(payment_id=payment_id, cart_id=cart_id).to_wire()
        return await self._technical_id("POST", "/ui/order/create", body)

    async def get_order(self, order_id: str) -> Order:
        data = await self._request("GET", f"/ui/order/{_segment(order_id)}")
        return _parse(Order, data)


def _parse(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RemoteError(f"API Error: unexpected {model.__name__} payload: {e}") from e
