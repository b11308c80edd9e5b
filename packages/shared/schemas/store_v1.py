"""Shared store API schema (v1).

Mirrors the JSON records served by the store backend under `/ui/*`. Attribute names are
snake_case; the wire names are camelCase aliases.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

PAYMENT_STATUS_PAID = "PAID"
PAYMENT_STATUS_INITIATED = "INITIATED"
DEFAULT_PAYMENT_PROVIDER = "DUMMY"


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TechnicalIdResponse(_WireModel):
    technical_id: str = Field(alias="technicalId")


# Products


class Localization(_WireModel):
    name: str = ""
    description: str = ""


class ProductSlim(_WireModel):
    sku: str
    name: str
    price: float
    category: str = ""
    quantity_available: int = Field(0, alias="quantityAvailable")


class ProductFull(ProductSlim):
    description: str = ""
    warehouse_id: str | None = Field(None, alias="warehouseId")
    media: list[str] = Field(default_factory=list)
    bundles: list[dict[str, Any]] = Field(default_factory=list)
    variants: list[dict[str, Any]] = Field(default_factory=list)
    events: list[Any] = Field(default_factory=list)
    attributes: dict[str, Any] = Field(default_factory=dict)
    compliance: dict[str, Any] = Field(default_factory=dict)
    inventory: dict[str, Any] = Field(default_factory=dict)
    options: dict[str, Any] = Field(default_factory=dict)
    relationships: dict[str, Any] = Field(default_factory=dict)
    localizations: dict[str, Localization] = Field(default_factory=dict)


class ProductFilters(_WireModel):
    search: str | None = None
    category: str | None = None
    min_price: float | None = Field(None, alias="minPrice")
    max_price: float | None = Field(None, alias="maxPrice")
    page: int | None = None
    page_size: int | None = Field(None, alias="pageSize")

    def to_query(self) -> dict[str, str]:
        params: dict[str, str] = {}
        for key, value in self.to_wire().items():
            if isinstance(value, str) and not value:
                continue
            params[key] = str(value)
        return params


# Guest contact


class Address(_WireModel):
    line1: str
    city: str
    postcode: str
    country: str


class GuestContact(_WireModel):
    name: str
    email: str
    phone: str
    address: Address

    def missing_fields(self) -> list[str]:
        """Required fields that are blank after trimming."""

        missing = [f for f in ("name", "email", "phone") if not getattr(self, f).strip()]
        missing.extend(
            f"address.{f}"
            for f in ("line1", "city", "postcode", "country")
            if not getattr(self.address, f).strip()
        )
        return missing


# Cart


class LineItem(_WireModel):
    sku: str
    name: str
    unit_price: float = Field(alias="price")
    quantity: int = Field(alias="qty", ge=0)


class CartState(_WireModel):
    id: str = Field(alias="cartId")
    status: str
    lines: list[LineItem] = Field(default_factory=list)

    # Server-computed. Never recomputed client side.
    total_item_count: int = Field(0, alias="totalItems")
    grand_total: float = Field(0.0, alias="grandTotal")

    guest_contact: GuestContact | None = Field(None, alias="guestContact")
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")

    def line(self, sku: str) -> LineItem | None:
        for line in self.lines:
            if line.sku == sku:
                return line
        return None


class LineMutation(_WireModel):
    sku: str
    qty: int


# Payments


class StartPaymentRequest(_WireModel):
    cart_id: str = Field(alias="cartId")
    amount: float | None = None
    provider: str = DEFAULT_PAYMENT_PROVIDER
    status: str = PAYMENT_STATUS_INITIATED


class Payment(_WireModel):
    id: str = Field(alias="paymentId")
    cart_id: str = Field(alias="cartId")
    amount: float | None = None
    provider: str = DEFAULT_PAYMENT_PROVIDER
    status: str
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")

    @property
    def is_paid(self) -> bool:
        return self.status == PAYMENT_STATUS_PAID


# Orders


class CreateOrderRequest(_WireModel):
    payment_id: str = Field(alias="paymentId")
    cart_id: str = Field(alias="cartId")


class OrderLine(_WireModel):
    sku: str
    name: str
    quantity: int = Field(alias="qty")
    unit_price: float = Field(alias="unitPrice")
    line_total: float = Field(alias="lineTotal")


class OrderTotals(_WireModel):
    items: float
    grand: float


class Order(_WireModel):
    id: str = Field(alias="orderId")
    order_number: str = Field(alias="orderNumber")
    status: str
    guest_contact: GuestContact = Field(alias="guestContact")
    lines: list[OrderLine] = Field(default_factory=list)
    totals: OrderTotals
    created_at: str = Field("", alias="createdAt")
    updated_at: str = Field("", alias="updatedAt")
