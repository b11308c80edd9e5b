from __future__ import annotations

from typing import Protocol

from packages.shared.schemas.store_v1 import (
    CartState,
    GuestContact,
    Order,
    Payment,
    ProductFilters,
    ProductFull,
    ProductSlim,
)


class StoreClientError(Exception):
    """Base class for store client errors."""


class RemoteError(StoreClientError):
    """A store endpoint answered non-2xx, or could not be reached at all.

    `status_code` is None for transport failures (DNS, refused connection, timeouts).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @classmethod
    def from_status(cls, status_code: int, reason: str) -> "RemoteError":
        return cls(f"API Error: {status_code} {reason}".rstrip(), status_code=status_code)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class StoreClient(Protocol):
    """Async client for the store backend's `/ui/*` REST API.

    Every create/mutate call returns the `technicalId` from the response body.
    """

    backend: str

    async def list_products(self, filters: ProductFilters | None = None) -> list[ProductSlim]: ...

    async def get_product(self, sku: str) -> ProductFull: ...

    async def create_or_return_cart(self) -> str: ...

    async def get_cart(self, cart_id: str) -> CartState: ...

    async def add_line(self, cart_id: str, sku: str, qty: int) -> str: ...

    async def update_line(self, cart_id: str, sku: str, qty: int) -> str: ...

    async def open_checkout(self, cart_id: str) -> str: ...

    async def submit_contact(self, cart_id: str, guest_contact: GuestContact) -> str: ...

    async def start_payment(self, cart_id: str, amount: float | None) -> str: ...

    async def get_payment(self, payment_id: str) -> Payment: ...

    async def create_order(self, payment_id: str, cart_id: str) -> str: ...

    async def get_order(self, order_id: str) -> Order: ...

    async def aclose(self) -> None: ...
