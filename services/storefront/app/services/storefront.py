from __future__ import annotations

import asyncio
from dataclasses import dataclass

from services.storefront.app.services.cart_identity import CartIdentityStore
from services.storefront.app.services.cart_sync import CartSynchronizer
from services.storefront.app.services.checkout import CheckoutOrchestrator
from services.storefront.app.services.navigator import RecordingNavigator
from services.storefront.app.services.notifier import RecordingNotifier
from services.storefront.app.services.order_confirmation import OrderConfirmation
from services.storefront.app.services.payment_poller import (
    PaymentStatusPoller,
    PollSettings,
    Sleep,
)
from services.storefront.app.services.session_state import (
    CartIdStorage,
    CartSession,
    SqlCartIdStorage,
)
from services.storefront.app.services.store_base import StoreClient
from services.storefront.app.services.store_factory import get_store_client


@dataclass
class Storefront:
    """Everything a renderer talks to, wired around one client session."""

    client: StoreClient
    session: CartSession
    identity: CartIdentityStore
    cart: CartSynchronizer
    checkout: CheckoutOrchestrator
    orders: OrderConfirmation
    notifier: RecordingNotifier
    navigator: RecordingNavigator


def build_storefront(
    client: StoreClient | None = None,
    storage: CartIdStorage | None = None,
    *,
    poll_settings: PollSettings | None = None,
    sleep: Sleep = asyncio.sleep,
) -> Storefront:
    client = client or get_store_client()
    session = CartSession(storage or SqlCartIdStorage())
    notifier = RecordingNotifier()
    navigator = RecordingNavigator()

    identity = CartIdentityStore(client, session)
    cart = CartSynchronizer(client, identity, session, notifier)
    poller = PaymentStatusPoller(client, poll_settings or PollSettings.from_env(), sleep=sleep)

    return Storefront(
        client=client,
        session=session,
        identity=identity,
        cart=cart,
        checkout=CheckoutOrchestrator(client, cart, poller, notifier, navigator),
        orders=OrderConfirmation(client, identity),
        notifier=notifier,
        navigator=navigator,
    )


_STOREFRONT: Storefront | None = None


def get_storefront() -> Storefront:
    """Return the process-wide storefront, building it on first use."""

    global _STOREFRONT

    if _STOREFRONT is None:
        _STOREFRONT = build_storefront()
    return _STOREFRONT


async def close_storefront() -> None:
    global _STOREFRONT

    if _STOREFRONT is not None:
        await _STOREFRONT.client.aclose()
        _STOREFRONT = None
