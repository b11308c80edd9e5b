from __future__ import annotations

import pytest

from packages.shared.schemas.store_v1 import Address, GuestContact
from services.storefront.app.services.payment_poller import PollSettings
from services.storefront.app.services.session_state import InMemoryCartIdStorage
from services.storefront.app.services.store_mock import InMemoryStoreClient
from services.storefront.app.services.storefront import Storefront, build_storefront


class RecordingSleep:
    """Stands in for asyncio.sleep so polling tests take no wall-clock time."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture()
def contact() -> GuestContact:
    return GuestContact(
        name="Ada Lovelace",
        email="ada@example.com",
        phone="+44 20 7946 0000",
        address=Address(line1="12 Analytical Row", city="London", postcode="N1 9GU", country="GB"),
    )


@pytest.fixture()
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture()
def store() -> InMemoryStoreClient:
    return InMemoryStoreClient(paid_after_polls=3)


@pytest.fixture()
def storage() -> InMemoryCartIdStorage:
    return InMemoryCartIdStorage()


@pytest.fixture()
def storefront(
    store: InMemoryStoreClient, storage: InMemoryCartIdStorage, sleep: RecordingSleep
) -> Storefront:
    return build_storefront(
        store,
        storage,
        poll_settings=PollSettings(interval_s=1.0, max_attempts=20),
        sleep=sleep,
    )
