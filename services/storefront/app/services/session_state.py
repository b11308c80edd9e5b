from __future__ import annotations

from typing import Protocol

import structlog

from packages.shared.schemas.store_v1 import CartState
from services.storefront.app.db.database import db_session
from services.storefront.app.db.models import ClientState

logger = structlog.get_logger(__name__)

CART_STORAGE_KEY = "cartTechnicalId"


class CartIdStorage(Protocol):
    """Durable single slot holding the current cart id. Absence means no active cart."""

    def load(self) -> str | None: ...

    def save(self, cart_id: str) -> None: ...

    def delete(self) -> None: ...


class InMemoryCartIdStorage:
    def __init__(self, cart_id: str | None = None) -> None:
        self._cart_id = cart_id

    def load(self) -> str | None:
        return self._cart_id

    def save(self, cart_id: str) -> None:
        self._cart_id = cart_id

    def delete(self) -> None:
        self._cart_id = None


class SqlCartIdStorage:
    """Keeps the cart id in the `client_state` table so it survives restarts."""

    def __init__(self, key: str = CART_STORAGE_KEY) -> None:
        self._key = key

    def load(self) -> str | None:
        with db_session() as db:
            row = db.get(ClientState, self._key)
            return row.value if row is not None else None

    def save(self, cart_id: str) -> None:
        with db_session() as db:
            row = db.get(ClientState, self._key)
            if row is None:
                db.add(ClientState(key=self._key, value=cart_id))
            else:
                row.value = cart_id
            db.commit()

    def delete(self) -> None:
        with db_session() as db:
            row = db.get(ClientState, self._key)
            if row is not None:
                db.delete(row)
                db.commit()


class CartSession:
    """The client session's cart: the persisted id plus the last loaded projection.

    Every change to the id is written through to storage before memory is updated, so a
    restart never sees a different id than the running process did.

    An id read back from storage is unconfirmed until the backend hands it out or a load
    of its cart succeeds.
    """

    def __init__(self, storage: CartIdStorage) -> None:
        self._storage = storage
        self._cart_id = storage.load()
        self._cart: CartState | None = None
        self._confirmed = False

    @property
    def cart_id(self) -> str | None:
        return self._cart_id

    @property
    def cart(self) -> CartState | None:
        return self._cart

    @property
    def confirmed(self) -> bool:
        return self._cart_id is not None and self._confirmed

    def remember(self, cart_id: str) -> None:
        if cart_id != self._cart_id:
            self._cart = None
        self._storage.save(cart_id)
        self._cart_id = cart_id
        self._confirmed = True

    def cache(self, cart: CartState) -> None:
        # Ignore late responses for a cart that is no longer current.
        if cart.id != self._cart_id:
            logger.debug("Dropping stale cart projection", cart_id=cart.id)
            return
        self._cart = cart
        self._confirmed = True

    def forget(self) -> None:
        self._storage.delete()
        self._cart_id = None
        self._cart = None
        self._confirmed = False
