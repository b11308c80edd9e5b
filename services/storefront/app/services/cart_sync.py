from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from packages.shared.schemas.store_v1 import CartState
from services.storefront.app.services.cart_identity import CartIdentityStore
from services.storefront.app.services.notifier import Notifier
from services.storefront.app.services.session_state import CartSession
from services.storefront.app.services.store_base import RemoteError, StoreClient

logger = structlog.get_logger(__name__)


class CartValidationError(ValueError):
    """A cart mutation was rejected before reaching the backend."""


class CartSynchronizer:
    """Applies cart mutations and refetches the authoritative cart after each one.

    Totals are only ever read from the last loaded cart. Mutations against the same cart
    id run one at a time, in the order they were issued.
    """

    def __init__(
        self,
        client: StoreClient,
        identity: CartIdentityStore,
        session: CartSession,
        notifier: Notifier,
    ) -> None:
        self._client = client
        self._identity = identity
        self._session = session
        self._notifier = notifier
        self._locks: dict[str, asyncio.Lock] = {}

    @property
    def cart_id(self) -> str | None:
        return self._session.cart_id

    @property
    def state(self) -> CartState | None:
        return self._session.cart

    @property
    def total_item_count(self) -> int:
        cart = self._session.cart
        return cart.total_item_count if cart is not None else 0

    @property
    def grand_total(self) -> float:
        cart = self._session.cart
        return cart.grand_total if cart is not None else 0.0

    async def load(self, cart_id: str) -> CartState:
        cart = await self._client.get_cart(cart_id)
        self._session.cache(cart)
        return cart

    async def ensure_cart(self) -> str:
        return await self._identity.resolve_cart_id()

    async def add_line(self, sku: str, qty: int = 1) -> CartState:
        try:
            # A restored id is checked against the backend before it is mutated.
            cart_id = self._session.cart_id if self._session.confirmed else None
            if cart_id is None:
                cart_id = await self.ensure_cart()

            async def mutate() -> None:
                await self._client.add_line(cart_id, sku, qty)

            cart = await self._mutate_and_reload(cart_id, mutate)
        except RemoteError as e:
            logger.warning("Add to cart failed", sku=sku, qty=qty, error=str(e))
            self._notifier.error("Failed to add to cart")
            raise

        logger.info(
            "Line added",
            cart_id=cart.id,
            sku=sku,
            qty=qty,
            total_items=cart.total_item_count,
        )
        self._notifier.success("Added to cart")
        return cart

    async def set_line_quantity(self, sku: str, qty: int) -> CartState | None:
        """Set a line's quantity; 0 removes the line. Returns None when there is no cart."""

        cart_id = self._session.cart_id
        if not cart_id:
            return None
        if qty < 0:
            raise CartValidationError(f"Quantity must be >= 0, got {qty}")

        try:

            async def mutate() -> None:
                await self._client.update_line(cart_id, sku, qty)

            cart = await self._mutate_and_reload(cart_id, mutate)
        except RemoteError as e:
            logger.warning("Cart update failed", cart_id=cart_id, sku=sku, qty=qty, error=str(e))
            self._notifier.error("Failed to update cart")
            raise

        if qty == 0:
            logger.info("Line removed", cart_id=cart_id, sku=sku)
            self._notifier.success("Item removed from cart")
        else:
            logger.info("Line updated", cart_id=cart_id, sku=sku, qty=qty)
            self._notifier.success("Cart updated")
        return cart

    async def _mutate_and_reload(
        self, cart_id: str, mutate: Callable[[], Awaitable[None]]
    ) -> CartState:
        async with self._lock_for(cart_id):
            await mutate()
            try:
                return await self.load(cart_id)
            except RemoteError as e:
                if e.is_not_found:
                    self._identity.discard_if_current(cart_id)
                raise

    def _lock_for(self, cart_id: str) -> asyncio.Lock:
        # Idle locks of carts that were discarded or cleared are dropped here.
        for stale in [k for k, lock in self._locks.items() if k != cart_id and not lock.locked()]:
            del self._locks[stale]

        lock = self._locks.get(cart_id)
        if lock is None:
            lock = self._locks[cart_id] = asyncio.Lock()
        return lock

    @property
    def tracked_cart_ids(self) -> list[str]:
        return list(self._locks)
