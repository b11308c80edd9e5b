from __future__ import annotations

from collections.abc import Iterator

import pytest
import structlog

from services.storefront.app.utils.logging import bind_checkout_context, clear_checkout_context


@pytest.fixture(autouse=True)
def _clean_contextvars() -> Iterator[None]:
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


def test_clearing_checkout_context_keeps_other_bindings() -> None:
    structlog.contextvars.bind_contextvars(request_id="req-1")
    bind_checkout_context(cart_id="cart-1")
    bind_checkout_context(payment_id="pay-1")

    clear_checkout_context()

    assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}


def test_clearing_without_a_checkout_is_harmless() -> None:
    clear_checkout_context()
    assert structlog.contextvars.get_contextvars() == {}
