from __future__ import annotations

import pytest

from packages.shared.schemas.store_v1 import Payment
from services.storefront.app.services.payment_poller import (
    PaymentStatusPoller,
    PaymentTimeoutError,
    PollSettings,
)
from services.storefront.app.services.store_base import RemoteError


class _ScriptedPayments:
    """Serves a fixed sequence of payment statuses, repeating the last one."""

    backend = "SCRIPTED"

    def __init__(self, statuses: list[str], fail_on_fetch: int | None = None) -> None:
        self._statuses = statuses
        self._fail_on_fetch = fail_on_fetch
        self.fetches = 0

    async def get_payment(self, payment_id: str) -> Payment:
        self.fetches += 1
        if self.fetches == self._fail_on_fetch:
            raise RemoteError.from_status(503, "Service Unavailable")

        status = self._statuses[min(self.fetches, len(self._statuses)) - 1]
        return Payment(id=payment_id, cart_id="cart-1", amount=20.0, status=status)


def _poller(payments: _ScriptedPayments, sleep) -> PaymentStatusPoller:
    return PaymentStatusPoller(payments, PollSettings(interval_s=1.0, max_attempts=20), sleep=sleep)


@pytest.mark.parametrize("n", [1, 3, 20])
async def test_resolves_on_the_attempt_that_sees_paid(n: int, sleep) -> None:
    payments = _ScriptedPayments(["INITIATED"] * (n - 1) + ["PAID"])

    payment = await _poller(payments, sleep).poll("pay-1")

    assert payment.is_paid
    assert payments.fetches == n
    assert sleep.delays == [1.0] * (n - 1)


async def test_stops_fetching_after_success(sleep) -> None:
    payments = _ScriptedPayments(["INITIATED", "PAID", "INITIATED"])

    await _poller(payments, sleep).poll("pay-1")

    assert payments.fetches == 2


async def test_times_out_after_twenty_pending_fetches(sleep) -> None:
    payments = _ScriptedPayments(["INITIATED"])

    with pytest.raises(PaymentTimeoutError) as exc_info:
        await _poller(payments, sleep).poll("pay-1")

    assert str(exc_info.value) == "Payment timeout - please try again"
    assert exc_info.value.attempts == 20
    assert payments.fetches == 20
    assert len(sleep.delays) == 19


async def test_non_paid_statuses_count_as_pending(sleep) -> None:
    payments = _ScriptedPayments(["FAILED"])

    with pytest.raises(PaymentTimeoutError):
        await _poller(payments, sleep).poll("pay-1")

    assert payments.fetches == 20


async def test_fetch_failure_aborts_immediately(sleep) -> None:
    payments = _ScriptedPayments(["INITIATED"], fail_on_fetch=2)

    with pytest.raises(RemoteError) as exc_info:
        await _poller(payments, sleep).poll("pay-1")

    assert not isinstance(exc_info.value, PaymentTimeoutError)
    assert exc_info.value.status_code == 503
    assert payments.fetches == 2
    assert sleep.delays == [1.0]


def test_poll_settings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("STOREFRONT_PAYMENT_POLL_INTERVAL_S", raising=False)
    monkeypatch.delenv("STOREFRONT_PAYMENT_POLL_MAX_ATTEMPTS", raising=False)
    assert PollSettings.from_env() == PollSettings(interval_s=1.0, max_attempts=20)

    monkeypatch.setenv("STOREFRONT_PAYMENT_POLL_INTERVAL_S", "0.5")
    monkeypatch.setenv("STOREFRONT_PAYMENT_POLL_MAX_ATTEMPTS", "5")
    assert PollSettings.from_env() == PollSettings(interval_s=0.5, max_attempts=5)

    monkeypatch.setenv("STOREFRONT_PAYMENT_POLL_MAX_ATTEMPTS", "0")
    with pytest.raises(ValueError, match="MAX_ATTEMPTS"):
        PollSettings.from_env()
