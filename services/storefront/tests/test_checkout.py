from __future__ import annotations

import pytest

from packages.shared.schemas.notification_v1 import NotificationKindV1
from packages.shared.schemas.store_v1 import GuestContact
from services.storefront.app.services.checkout import CheckoutStage, CheckoutValidationError
from services.storefront.app.services.payment_poller import PaymentTimeoutError
from services.storefront.app.services.session_state import InMemoryCartIdStorage
from services.storefront.app.services.store_base import RemoteError
from services.storefront.app.services.store_mock import InMemoryStoreClient
from services.storefront.app.services.storefront import Storefront

PIPELINE_CALLS = {"open_checkout", "submit_contact", "start_payment", "get_payment", "create_order"}


def _pipeline_calls(store: InMemoryStoreClient) -> list[str]:
    return [c for c in store.calls if c in PIPELINE_CALLS]


async def test_end_to_end_checkout(
    storefront: Storefront,
    store: InMemoryStoreClient,
    storage: InMemoryCartIdStorage,
    contact: GuestContact,
    sleep,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cart = await storefront.cart.add_line("A1", 2)
    assert cart.line("A1").unit_price == 10.0
    assert storefront.cart.grand_total == 20.0

    started: list[tuple[str, float | None]] = []
    ordered: list[tuple[str, str]] = []
    original_start = store.start_payment
    original_create = store.create_order

    async def spy_start(cart_id: str, amount: float | None) -> str:
        started.append((cart_id, amount))
        return await original_start(cart_id, amount)

    async def spy_create(payment_id: str, cart_id: str) -> str:
        ordered.append((payment_id, cart_id))
        return await original_create(payment_id, cart_id)

    monkeypatch.setattr(store, "start_payment", spy_start)
    monkeypatch.setattr(store, "create_order", spy_create)

    order_id = await storefront.checkout.run_checkout(cart.id, contact)

    assert started == [(cart.id, 20.0)]
    assert store.call_count("get_payment") == 3
    assert sleep.delays == [1.0, 1.0]
    assert len(ordered) == 1
    assert ordered[0][1] == cart.id
    assert ordered[0][0].startswith("pay_")
    assert _pipeline_calls(store) == [
        "open_checkout",
        "submit_contact",
        "start_payment",
        "get_payment",
        "get_payment",
        "get_payment",
        "create_order",
    ]

    assert storefront.checkout.error is None
    assert storefront.checkout.in_progress is False
    assert storefront.navigator.current == f"/order/{order_id}"

    # The cart survives until the order view has loaded the order.
    assert storage.load() == cart.id

    order = await storefront.orders.load(order_id)

    assert order.totals.grand == 20.0
    assert order.lines[0].sku == "A1"
    assert order.lines[0].line_total == 20.0
    assert storage.load() is None
    assert storefront.session.cart is None


async def test_payment_notifications_replace_each_other(
    storefront: Storefront, contact: GuestContact
) -> None:
    cart = await storefront.cart.add_line("A1", 1)
    storefront.notifier.drain()

    await storefront.checkout.run_checkout(cart.id, contact)

    pending = storefront.notifier.pending
    assert [(n.kind, n.message, n.key) for n in pending] == [
        (NotificationKindV1.SUCCESS, "Payment successful!", "payment")
    ]


@pytest.mark.parametrize("store", [InMemoryStoreClient(paid_after_polls=None)])
async def test_payment_timeout_never_creates_order(
    store: InMemoryStoreClient,
    storefront: Storefront,
    contact: GuestContact,
    sleep,
) -> None:
    cart = await storefront.cart.add_line("A1", 2)

    with pytest.raises(PaymentTimeoutError):
        await storefront.checkout.run_checkout(cart.id, contact)

    assert store.call_count("get_payment") == 20
    assert store.call_count("create_order") == 0
    assert len(sleep.delays) == 19
    assert storefront.checkout.error == "Payment timeout - please try again"
    assert storefront.checkout.failed_stage is CheckoutStage.POLL_PAYMENT
    assert storefront.navigator.current is None
    assert storefront.cart.cart_id == cart.id

    last = storefront.notifier.pending[-1]
    assert last.kind is NotificationKindV1.ERROR
    assert last.message == "Payment timeout - please try again"
    assert last.key == "payment"


async def test_submit_contact_failure_stops_the_pipeline(
    store: InMemoryStoreClient,
    storefront: Storefront,
    contact: GuestContact,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cart = await storefront.cart.add_line("A1", 1)

    async def rejected(cart_id: str, guest_contact: GuestContact) -> str:
        store.calls.append("submit_contact")
        raise RemoteError.from_status(500, "Internal Server Error")

    monkeypatch.setattr(store, "submit_contact", rejected)

    with pytest.raises(RemoteError):
        await storefront.checkout.run_checkout(cart.id, contact)

    assert _pipeline_calls(store) == ["open_checkout", "submit_contact"]
    assert store.call_count("start_payment") == 0
    assert store.call_count("create_order") == 0
    assert storefront.checkout.error == "API Error: 500 Internal Server Error"
    assert storefront.checkout.failed_stage is CheckoutStage.SUBMIT_CONTACT

    last = storefront.notifier.pending[-1]
    assert (last.kind, last.message) == (
        NotificationKindV1.ERROR,
        "API Error: 500 Internal Server Error",
    )


async def test_poll_fetch_failure_aborts_checkout(
    store: InMemoryStoreClient,
    storefront: Storefront,
    contact: GuestContact,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    cart = await storefront.cart.add_line("A1", 1)

    async def unreachable(payment_id: str):
        raise RemoteError("Network error: ConnectError: refused")

    monkeypatch.setattr(store, "get_payment", unreachable)

    with pytest.raises(RemoteError):
        await storefront.checkout.run_checkout(cart.id, contact)

    assert store.call_count("create_order") == 0
    assert storefront.checkout.failed_stage is CheckoutStage.POLL_PAYMENT
    assert storefront.checkout.error == "Network error: ConnectError: refused"


async def test_blank_contact_field_is_refused_before_any_request(
    store: InMemoryStoreClient, storefront: Storefront, contact: GuestContact
) -> None:
    cart = await storefront.cart.add_line("A1", 1)
    storefront.notifier.drain()
    calls_before = list(store.calls)

    contact.address.city = "   "

    with pytest.raises(CheckoutValidationError) as exc_info:
        await storefront.checkout.run_checkout(cart.id, contact)

    assert exc_info.value.missing_fields == ["address.city"]
    assert store.calls == calls_before
    assert storefront.checkout.error is None
    assert [(n.kind, n.message) for n in storefront.notifier.pending] == [
        (NotificationKindV1.ERROR, "Please fill in all required fields")
    ]


async def test_empty_cart_is_refused(
    store: InMemoryStoreClient, storefront: Storefront, contact: GuestContact
) -> None:
    cart_id = await storefront.cart.ensure_cart()

    with pytest.raises(CheckoutValidationError, match="Your cart is empty"):
        await storefront.checkout.run_checkout(cart_id, contact)

    assert store.call_count("open_checkout") == 0


async def test_missing_cart_id_is_refused(
    store: InMemoryStoreClient, storefront: Storefront, contact: GuestContact
) -> None:
    with pytest.raises(CheckoutValidationError):
        await storefront.checkout.run_checkout(None, contact)

    assert store.calls == []


async def test_order_view_failure_keeps_the_cart(
    storefront: Storefront, storage: InMemoryCartIdStorage
) -> None:
    cart_id = await storefront.cart.ensure_cart()

    with pytest.raises(RemoteError):
        await storefront.orders.load("ord_missing")

    assert storefront.orders.error == "API Error: 404 Not Found"
    assert storage.load() == cart_id


async def test_order_totals_carry_the_items_subtotal(
    storefront: Storefront, storage: InMemoryCartIdStorage, contact: GuestContact
) -> None:
    cart = await storefront.cart.add_line("B2", 1)
    await storefront.cart.add_line("A1", 2)

    order_id = await storefront.checkout.run_checkout(cart.id, contact)
    order = await storefront.orders.load(order_id)

    assert order.totals.items == 35.99
    assert order.totals.grand == 35.99
    assert storage.load() is None
