from __future__ import annotations

import structlog

from packages.shared.schemas.store_v1 import Order
from services.storefront.app.services.cart_identity import CartIdentityStore
from services.storefront.app.services.store_base import RemoteError, StoreClient

logger = structlog.get_logger(__name__)


class OrderConfirmation:
    """Loads a freshly created order; the session's cart is cleared once it loads."""

    def __init__(self, client: StoreClient, identity: CartIdentityStore) -> None:
        self._client = client
        self._identity = identity
        self.order: Order | None = None
        self.error: str | None = None

    async def load(self, order_id: str) -> Order:
        self.error = None
        try:
            order = await self._client.get_order(order_id)
        except RemoteError as e:
            self.error = str(e) or "Failed to load order"
            logger.warning("Order load failed", order_id=order_id, error=self.error)
            raise

        self.order = order
        self._identity.clear()
        logger.info("Order confirmed", order_id=order.id, order_number=order.order_number)
        return order
