from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import structlog

from packages.shared.schemas.store_v1 import Payment
from services.storefront.app.services.store_base import StoreClient

logger = structlog.get_logger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class CheckoutError(Exception):
    """Base class for checkout pipeline errors raised by the storefront itself."""


class PaymentTimeoutError(CheckoutError):
    """The payment never reached PAID within the polling budget. Safe to retry."""

    def __init__(self, payment_id: str, attempts: int) -> None:
        super().__init__("Payment timeout - please try again")
        self.payment_id = payment_id
        self.attempts = attempts


@dataclass(frozen=True, slots=True)
class PollSettings:
    interval_s: float = 1.0
    max_attempts: int = 20

    @classmethod
    def from_env(cls) -> "PollSettings":
        interval_s = float(os.getenv("STOREFRONT_PAYMENT_POLL_INTERVAL_S", "1.0"))
        max_attempts = int(os.getenv("STOREFRONT_PAYMENT_POLL_MAX_ATTEMPTS", "20"))
        if max_attempts < 1:
            raise ValueError("STOREFRONT_PAYMENT_POLL_MAX_ATTEMPTS must be >= 1")
        return cls(interval_s=interval_s, max_attempts=max_attempts)


class PaymentStatusPoller:
    """Polls a payment until it is PAID, with a fixed interval and attempt budget.

    A failed fetch is not retried: it propagates immediately and ends the checkout.
    """

    def __init__(
        self,
        client: StoreClient,
        settings: PollSettings | None = None,
        *,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._client = client
        self._settings = settings or PollSettings()
        self._sleep = sleep

    @property
    def settings(self) -> PollSettings:
        return self._settings

    async def poll(self, payment_id: str) -> Payment:
        max_attempts = self._settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            payment = await self._client.get_payment(payment_id)
            if payment.is_paid:
                logger.info("Payment settled", payment_id=payment_id, attempt=attempt)
                return payment

            logger.debug(
                "Payment pending",
                payment_id=payment_id,
                attempt=attempt,
                status=payment.status,
            )
            if attempt < max_attempts:
                await self._sleep(self._settings.interval_s)

        logger.warning("Payment polling timed out", payment_id=payment_id, attempts=max_attempts)
        raise PaymentTimeoutError(payment_id, max_attempts)
