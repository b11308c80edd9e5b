from __future__ import annotations

import asyncio

import structlog

from services.storefront.app.services.session_state import CartSession
from services.storefront.app.services.store_base import RemoteError, StoreClient

logger = structlog.get_logger(__name__)


class CartIdentityStore:
    """Owns the session's cart id: absent -> resolved -> persisted -> cleared."""

    def __init__(self, client: StoreClient, session: CartSession) -> None:
        self._client = client
        self._session = session
        self._resolve_lock = asyncio.Lock()

    @property
    def cart_id(self) -> str | None:
        return self._session.cart_id

    async def resolve_cart_id(self) -> str:
        """Return a usable cart id, creating (or re-attaching to) one when needed.

        A persisted id is validated by loading its cart. If the backend rejects it for any
        reason the id is dropped and a fresh create-or-return is issued. Failures of the
        create-or-return itself propagate.
        """

        async with self._resolve_lock:
            cart_id = self._session.cart_id
            if cart_id:
                try:
                    self._session.cache(await self._client.get_cart(cart_id))
                    return cart_id
                except RemoteError as e:
                    logger.warning(
                        "Discarding persisted cart id",
                        cart_id=cart_id,
                        status_code=e.status_code,
                        error=str(e),
                    )
                    self._session.forget()

            cart_id = await self._client.create_or_return_cart()
            self._session.remember(cart_id)
            logger.info("Cart resolved", cart_id=cart_id)

            try:
                self._session.cache(await self._client.get_cart(cart_id))
            except RemoteError:
                self.discard_if_current(cart_id)
                raise

            return cart_id

    def discard_if_current(self, cart_id: str) -> None:
        if self._session.cart_id == cart_id:
            logger.info("Cart id rejected by backend", cart_id=cart_id)
            self._session.forget()

    def clear(self) -> None:
        logger.info("Cart cleared", cart_id=self._session.cart_id)
        self._session.forget()
