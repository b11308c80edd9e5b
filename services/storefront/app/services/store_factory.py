from __future__ import annotations

import os

from services.storefront.app.services.store_base import StoreClient
from services.storefront.app.services.store_mock import InMemoryStoreClient


def _mock_paid_after_polls() -> int | None:
    raw = os.getenv("STOREFRONT_MOCK_PAID_AFTER_POLLS", "3").strip().lower()
    if raw in {"", "never", "none"}:
        return None
    return int(raw)


def get_store_client() -> StoreClient:
    """Select a store client based on env vars.

    Defaults to the in-memory backend so tests and local dev are deterministic unless
    explicitly configured otherwise.
    """

    mode = os.getenv("STOREFRONT_STORE_CLIENT", "mock").strip().lower()

    if mode == "mock":
        return InMemoryStoreClient(paid_after_polls=_mock_paid_after_polls())

    if mode == "http":
        from services.storefront.app.services.store_http import HttpStoreClient

        return HttpStoreClient.from_env()

    raise ValueError(f"Unknown STOREFRONT_STORE_CLIENT={mode!r}. Expected mock or http.")
