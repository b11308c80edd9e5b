from __future__ import annotations

from enum import Enum

import structlog

from packages.shared.schemas.store_v1 import GuestContact
from services.storefront.app.services.cart_sync import CartSynchronizer
from services.storefront.app.services.navigator import Navigator, order_destination
from services.storefront.app.services.notifier import Notifier
from services.storefront.app.services.payment_poller import (
    CheckoutError,
    PaymentStatusPoller,
    PaymentTimeoutError,
)
from services.storefront.app.services.store_base import StoreClient
from services.storefront.app.utils.logging import bind_checkout_context, clear_checkout_context

logger = structlog.get_logger(__name__)

PAYMENT_NOTIFICATION_KEY = "payment"


class CheckoutValidationError(CheckoutError):
    """Checkout preconditions failed; nothing was sent to the backend."""

    def __init__(self, message: str, missing_fields: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_fields = missing_fields or []


class CheckoutStage(str, Enum):
    OPEN_CHECKOUT = "OPEN_CHECKOUT"
    SUBMIT_CONTACT = "SUBMIT_CONTACT"
    START_PAYMENT = "START_PAYMENT"
    POLL_PAYMENT = "POLL_PAYMENT"
    CREATE_ORDER = "CREATE_ORDER"


class CheckoutOrchestrator:
    """Runs a guest checkout: open -> contact -> payment -> poll -> order.

    Stages run strictly in order and the first failure ends the run. The failure's message
    lands in `error` and is sent to the notifier before the exception is re-raised.
    """

    def __init__(
        self,
        client: StoreClient,
        cart: CartSynchronizer,
        poller: PaymentStatusPoller,
        notifier: Notifier,
        navigator: Navigator | None = None,
    ) -> None:
        self._client = client
        self._cart = cart
        self._poller = poller
        self._notifier = notifier
        self._navigator = navigator

        self.in_progress = False
        self.stage: CheckoutStage | None = None
        self.failed_stage: CheckoutStage | None = None
        self.error: str | None = None

    def _check_preconditions(self, cart_id: str | None, guest_contact: GuestContact) -> str:
        if not cart_id:
            raise CheckoutValidationError("Your cart is empty")

        cart = self._cart.state
        if cart is None or cart.id != cart_id or not cart.lines:
            raise CheckoutValidationError("Your cart is empty")

        missing = guest_contact.missing_fields()
        if missing:
            raise CheckoutValidationError("Please fill in all required fields", missing)
        return cart_id

    async def run_checkout(self, cart_id: str | None, guest_contact: GuestContact) -> str:
        """Check out the cart and return the new order id."""

        try:
            valid_id = self._check_preconditions(cart_id, guest_contact)
        except CheckoutValidationError as e:
            logger.info("Checkout refused", cart_id=cart_id, missing_fields=e.missing_fields)
            self._notifier.error(str(e))
            raise

        amount = self._cart.grand_total

        self.in_progress = True
        self.stage = None
        self.error = None
        self.failed_stage = None
        bind_checkout_context(cart_id=valid_id)
        try:
            order_id = await self._run_stages(valid_id, guest_contact, amount)
        except Exception as e:
            self.failed_stage = self.stage
            self.error = str(e) or "Checkout failed"
            logger.warning(
                "Checkout failed",
                stage=self.failed_stage.value if self.failed_stage else None,
                error=self.error,
                timeout=isinstance(e, PaymentTimeoutError),
            )
            # A poll failure replaces the "Processing payment..." spinner.
            polling = self.failed_stage is CheckoutStage.POLL_PAYMENT
            self._notifier.error(self.error, key=PAYMENT_NOTIFICATION_KEY if polling else None)
            raise
        finally:
            self.in_progress = False
            clear_checkout_context()

        if self._navigator is not None:
            self._navigator.navigate(order_destination(order_id))
        return order_id

    async def _run_stages(self, cart_id: str, guest_contact: GuestContact, amount: float) -> str:
        self._enter(CheckoutStage.OPEN_CHECKOUT)
        await self._client.open_checkout(cart_id)

        self._enter(CheckoutStage.SUBMIT_CONTACT)
        await self._client.submit_contact(cart_id, guest_contact)

        self._enter(CheckoutStage.START_PAYMENT)
        payment_id = await self._client.start_payment(cart_id, amount)
        bind_checkout_context(payment_id=payment_id)

        self._enter(CheckoutStage.POLL_PAYMENT)
        self._notifier.loading("Processing payment...", key=PAYMENT_NOTIFICATION_KEY)
        await self._poller.poll(payment_id)
        self._notifier.success("Payment successful!", key=PAYMENT_NOTIFICATION_KEY)

        self._enter(CheckoutStage.CREATE_ORDER)
        order_id = await self._client.create_order(payment_id, cart_id)
        logger.info("Order created", order_id=order_id, amount=amount)
        return order_id

    def _enter(self, stage: CheckoutStage) -> None:
        self.stage = stage
        logger.debug("Checkout stage started", stage=stage.value)
