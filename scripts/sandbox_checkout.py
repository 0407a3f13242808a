"""Drive one create-order / verify-payment round trip against a running relay.

Meant for Razorpay test-mode deployments: the checkout signature is computed
locally from the key secret, so no real payment is made.
"""

import argparse
import asyncio
import hashlib
import hmac
import json
import os
from uuid import uuid4

import httpx


def checkout_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """Signature Razorpay Checkout returns for a successful payment."""

    return hmac.new(key_secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


async def run(base_url: str, amount: float, currency: str, key_secret: str) -> int:
    """Create an order, confirm it, and print both responses."""

    correlation_id = str(uuid4())
    async with httpx.AsyncClient(base_url=base_url, timeout=10.0) as client:
        created = await client.post(
            "/create-order",
            json={"amount": amount, "currency": currency, "userData": {"source": "sandbox_checkout"}},
            headers={"x-correlation-id": correlation_id},
        )
        print(f"create-order status={created.status_code} body={json.dumps(created.json())}")
        if created.status_code != 200:
            return 1

        order_id = created.json()["orderId"]
        payment_id = f"pay_sandbox{uuid4().hex[:10]}"
        verified = await client.post(
            "/verify-payment",
            json={
                "orderId": order_id,
                "paymentId": payment_id,
                "signature": checkout_signature(order_id, payment_id, key_secret),
            },
            headers={"x-correlation-id": correlation_id},
        )
        print(f"verify-payment status={verified.status_code} body={json.dumps(verified.json())}")
        return 0 if verified.status_code == 200 else 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Sandbox order round trip against the relay.")
    parser.add_argument("--base-url", default="http://localhost:5000")
    parser.add_argument("--amount", type=float, default=1.0)
    parser.add_argument("--currency", default="INR")
    parser.add_argument("--key-secret", default=os.getenv("RAZORPAY_KEY_SECRET", ""))
    args = parser.parse_args()
    if not args.key_secret:
        raise SystemExit("Provide --key-secret or RAZORPAY_KEY_SECRET")
    raise SystemExit(asyncio.run(run(args.base_url, args.amount, args.currency, args.key_secret)))
