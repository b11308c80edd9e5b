from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus
from uuid import uuid4

from packages.shared.schemas.store_v1 import (
    PAYMENT_STATUS_INITIATED,
    PAYMENT_STATUS_PAID,
    CartState,
    GuestContact,
    LineItem,
    Order,
    OrderLine,
    OrderTotals,
    Payment,
    ProductFilters,
    ProductFull,
    ProductSlim,
)
from services.storefront.app.services.store_base import RemoteError

CART_ACTIVE = "ACTIVE"
CART_CHECKING_OUT = "CHECKING_OUT"
CART_CONVERTED = "CONVERTED"

ORDER_WAITING_TO_FULFILL = "WAITING_TO_FULFILL"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _fail(status: HTTPStatus) -> RemoteError:
    return RemoteError.from_status(status.value, status.phrase)


def _default_catalog() -> dict[str, ProductFull]:
    rows = [
        ("A1", "Paper towels", 10.00, "household", 50),
        ("B2", "Detergent", 15.99, "household", 20),
        ("C3", "Pet food", 24.99, "pets", 10),
    ]
    return {
        sku: ProductFull(
            sku=sku,
            name=name,
            price=price,
            category=category,
            quantity_available=available,
            description=f"{name} (demo catalogue)",
            warehouse_id="WH-1",
        )
        for sku, name, price, category, available in rows
    }


class InMemoryStoreClient:
    """Deterministic stand-in for the store backend.

    Behaves like the real API closely enough for local dev and tests: one open cart per
    client (create-or-return), server-computed totals, and payments that settle to PAID
    after `paid_after_polls` reads. `paid_after_polls=None` never settles.

    Every call is appended to `calls` so tests can assert what was (not) invoked.
    """

    backend = "MOCK"

    def __init__(
        self,
        *,
        catalog: dict[str, ProductFull] | None = None,
        paid_after_polls: int | None = 3,
    ) -> None:
        self._catalog = catalog if catalog is not None else _default_catalog()
        self._paid_after_polls = paid_after_polls

        self._carts: dict[str, CartState] = {}
        self._open_cart_id: str | None = None
        self._payments: dict[str, Payment] = {}
        self._payment_polls: dict[str, int] = {}
        self._orders: dict[str, Order] = {}

        self.calls: list[str] = []

    def call_count(self, name: str) -> int:
        return self.calls.count(name)

    async def aclose(self) -> None:
        return None

    # Products

    async def list_products(self, filters: ProductFilters | None = None) -> list[ProductSlim]:
        self.calls.append("list_products")
        filters = filters or ProductFilters()

        rows = list(self._catalog.values())
        if filters.search:
            needle = filters.search.lower()
            rows = [p for p in rows if needle in p.name.lower() or needle in p.sku.lower()]
        if filters.category:
            rows = [p for p in rows if p.category == filters.category]
        if filters.min_price is not None:
            rows = [p for p in rows if p.price >= filters.min_price]
        if filters.max_price is not None:
            rows = [p for p in rows if p.price <= filters.max_price]

        if filters.page_size:
            start = (filters.page or 0) * filters.page_size
            rows = rows[start : start + filters.page_size]

        return [ProductSlim.model_validate(p.model_dump()) for p in rows]

    async def get_product(self, sku: str) -> ProductFull:
        self.calls.append("get_product")
        product = self._catalog.get(sku)
        if product is None:
            raise _fail(HTTPStatus.NOT_FOUND)
        return product.model_copy(deep=True)

    # Cart

    async def create_or_return_cart(self) -> str:
        self.calls.append("create_or_return_cart")
        if self._open_cart_id is not None:
            return self._open_cart_id

        cart_id = f"cart_{uuid4().hex[:12]}"
        now = _now()
        self._carts[cart_id] = CartState(
            id=cart_id, status=CART_ACTIVE, created_at=now, updated_at=now
        )
        self._open_cart_id = cart_id
        return cart_id

    async def get_cart(self, cart_id: str) -> CartState:
        self.calls.append("get_cart")
        return self._cart(cart_id).model_copy(deep=True)

    async def add_line(self, cart_id: str, sku: str, qty: int) -> str:
        self.calls.append("add_line")
        cart = self._mutable_cart(cart_id)
        product = self._catalog.get(sku)
        if product is None:
            raise _fail(HTTPStatus.NOT_FOUND)
        if qty < 1:
            raise _fail(HTTPStatus.BAD_REQUEST)

        existing = cart.line(sku)
        if existing is None:
            cart.lines.append(
                LineItem(sku=sku, name=product.name, unit_price=product.price, quantity=qty)
            )
        else:
            existing.quantity += qty

        self._recompute(cart)
        return cart_id

    async def update_line(self, cart_id: str, sku: str, qty: int) -> str:
        self.calls.append("update_line")
        cart = self._mutable_cart(cart_id)
        if qty < 0:
            raise _fail(HTTPStatus.BAD_REQUEST)

        existing = cart.line(sku)
        if existing is None:
            raise _fail(HTTPStatus.NOT_FOUND)

        if qty == 0:
            cart.lines = [line for line in cart.lines if line.sku != sku]
        else:
            existing.quantity = qty

        self._recompute(cart)
        return cart_id

    async def open_checkout(self, cart_id: str) -> str:
        self.calls.append("open_checkout")
        cart = self._mutable_cart(cart_id)
        if not cart.lines:
            raise _fail(HTTPStatus.CONFLICT)
        cart.status = CART_CHECKING_OUT
        cart.updated_at = _now()
        return cart_id

    async def submit_contact(self, cart_id: str, guest_contact: GuestContact) -> str:
        self.calls.append("submit_contact")
        cart = self._cart(cart_id)
        if cart.status != CART_CHECKING_OUT:
            raise _fail(HTTPStatus.CONFLICT)
        cart.guest_contact = guest_contact.model_copy(deep=True)
        cart.updated_at = _now()
        return cart_id

    # Payments

    async def start_payment(self, cart_id: str, amount: float | None) -> str:
        self.calls.append("start_payment")
        cart = self._cart(cart_id)

        payment_id = f"pay_{uuid4().hex[:12]}"
        now = _now()
        self._payments[payment_id] = Payment(
            id=payment_id,
            cart_id=cart_id,
            amount=amount if amount is not None else cart.grand_total,
            status=PAYMENT_STATUS_INITIATED,
            created_at=now,
            updated_at=now,
        )
        self._payment_polls[payment_id] = 0
        return payment_id

    async def get_payment(self, payment_id: str) -> Payment:
        self.calls.append("get_payment")
        payment = self._payments.get(payment_id)
        if payment is None:
            raise _fail(HTTPStatus.NOT_FOUND)

        self._payment_polls[payment_id] += 1
        if (
            self._paid_after_polls is not None
            and payment.status != PAYMENT_STATUS_PAID
            and self._payment_polls[payment_id] >= self._paid_after_polls
        ):
            payment.status = PAYMENT_STATUS_PAID
            payment.updated_at = _now()

        return payment.model_copy(deep=True)

    # Orders

    async def create_order(self, payment_id: str, cart_id: str) -> str:
        self.calls.append("create_order")
        payment = self._payments.get(payment_id)
        if payment is None:
            raise _fail(HTTPStatus.NOT_FOUND)
        if payment.cart_id != cart_id or not payment.is_paid:
            raise _fail(HTTPStatus.CONFLICT)

        cart = self._cart(cart_id)
        if cart.guest_contact is None:
            raise _fail(HTTPStatus.CONFLICT)

        order_id = f"ord_{uuid4().hex[:12]}"
        now = _now()
        self._orders[order_id] = Order(
            id=order_id,
            order_number=f"{len(self._orders) + 1:06d}",
            status=ORDER_WAITING_TO_FULFILL,
            guest_contact=cart.guest_contact,
            lines=[
                OrderLine(
                    sku=line.sku,
                    name=line.name,
                    quantity=line.quantity,
                    unit_price=line.unit_price,
                    line_total=round(line.unit_price * line.quantity, 2),
                )
                for line in cart.lines
            ],
            totals=OrderTotals(
                items=round(sum(line.unit_price * line.quantity for line in cart.lines), 2),
                grand=cart.grand_total,
            ),
            created_at=now,
            updated_at=now,
        )

        cart.status = CART_CONVERTED
        cart.updated_at = now
        if self._open_cart_id == cart_id:
            self._open_cart_id = None
        return order_id

    async def get_order(self, order_id: str) -> Order:
        self.calls.append("get_order")
        order = self._orders.get(order_id)
        if order is None:
            raise _fail(HTTPStatus.NOT_FOUND)
        return order.model_copy(deep=True)

    def _cart(self, cart_id: str) -> CartState:
        cart = self._carts.get(cart_id)
        if cart is None:
            raise _fail(HTTPStatus.NOT_FOUND)
        return cart

    def _mutable_cart(self, cart_id: str) -> CartState:
        cart = self._cart(cart_id)
        if cart.status == CART_CONVERTED:
            raise _fail(HTTPStatus.CONFLICT)
        return cart

    @staticmethod
    def _recompute(cart: CartState) -> None:
        cart.total_item_count = sum(line.quantity for line in cart.lines)
        cart.grand_total = round(sum(line.unit_price * line.quantity for line in cart.lines), 2)
        cart.updated_at = _now()
