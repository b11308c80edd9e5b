from __future__ import annotations

import argparse
import asyncio
import os

from packages.shared.schemas.store_v1 import Address, GuestContact
from services.storefront.app.db.init_db import init_db
from services.storefront.app.services.storefront import build_storefront
from services.storefront.app.utils.logging import configure_logging


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Add a product to the cart and run a full guest checkout"
    )
    parser.add_argument(
        "--backend",
        choices=["mock", "http"],
        default=os.getenv("STOREFRONT_STORE_CLIENT", "mock"),
        help="Store backend to use (default: STOREFRONT_STORE_CLIENT or mock)",
    )
    parser.add_argument(
        "--api-base",
        default=os.getenv("STOREFRONT_API_BASE", "http://localhost:8080"),
        help="Store API base URL for --backend http (default: http://localhost:8080)",
    )
    parser.add_argument("--sku", default="A1")
    parser.add_argument("--qty", type=int, default=1)

    parser.add_argument("--name", default="Ada Lovelace")
    parser.add_argument("--email", default="ada@example.com")
    parser.add_argument("--phone", default="+44 20 7946 0000")
    parser.add_argument("--line1", default="12 Analytical Row")
    parser.add_argument("--city", default="London")
    parser.add_argument("--postcode", default="N1 9GU")
    parser.add_argument("--country", default="GB")
    return parser.parse_args()


async def _run(args: argparse.Namespace) -> int:
    storefront = build_storefront()
    try:
        cart = await storefront.cart.add_line(args.sku, args.qty)
        print(f"Cart {cart.id}: {cart.total_item_count} item(s), total {cart.grand_total:.2f}")

        contact = GuestContact(
            name=args.name,
            email=args.email,
            phone=args.phone,
            address=Address(
                line1=args.line1,
                city=args.city,
                postcode=args.postcode,
                country=args.country,
            ),
        )
        order_id = await storefront.checkout.run_checkout(cart.id, contact)
        order = await storefront.orders.load(order_id)
    except Exception as e:
        print(f"Checkout failed: {e}")
        return 1
    finally:
        await storefront.client.aclose()

    print(f"Order {order.order_number} ({order.id}) status={order.status}")
    print(f"Items: {order.totals.items:.2f}  Total: {order.totals.grand:.2f}")
    return 0


def main() -> int:
    args = _parse_args()
    os.environ["STOREFRONT_STORE_CLIENT"] = args.backend
    os.environ["STOREFRONT_API_BASE"] = args.api_base

    configure_logging()
    init_db()
    return asyncio.run(_run(args))


if __name__ == "__main__":
    raise SystemExit(main())
