"""Payment gateway client used by the order handlers.

`RazorpayGateway` is the production implementation. Handlers only depend on
the `PaymentGateway` protocol so tests can substitute a fake.
"""

from typing import Any, Protocol

import razorpay
from razorpay.errors import SignatureVerificationError

from payrelay.common.config import Settings
from payrelay.common.errors import ConfigurationError, GatewayError, SignatureMismatchError
from payrelay.common.metrics import gateway_latency_seconds


class PaymentGateway(Protocol):
    def create_order(self, amount_minor: int, currency: str, receipt: str) -> dict[str, Any]:
        """Create a gateway order and return the gateway's order payload."""

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        """Raise `SignatureMismatchError` unless the checkout signature is genuine."""


class RazorpayGateway:
    """Thin wrapper over `razorpay.Client` with relay error translation."""

    def __init__(self, client: razorpay.Client, service_name: str = "payrelay") -> None:
        self.client = client
        self.service_name = service_name

    @classmethod
    def from_settings(cls, cfg: Settings) -> "RazorpayGateway":
        if not cfg.razorpay_key_id or not cfg.razorpay_key_secret:
            raise ConfigurationError("RAZORPAY_KEY_ID and RAZORPAY_KEY_SECRET are required")
        client = razorpay.Client(auth=(cfg.razorpay_key_id, cfg.razorpay_key_secret))
        client.set_app_details({"title": cfg.service_name})
        return cls(client, cfg.service_name)

    def create_order(self, amount_minor: int, currency: str, receipt: str) -> dict[str, Any]:
        payload = {"amount": amount_minor, "currency": currency, "receipt": receipt}
        with gateway_latency_seconds.labels(service=self.service_name, operation="create_order").time():
            try:
                order = self.client.order.create(data=payload)
            except Exception as exc:
                raise GatewayError("Order creation failed") from exc
        if not isinstance(order, dict) or not order.get("id"):
            raise GatewayError("Order creation failed")
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> None:
        # HMAC-SHA256("<order_id>|<payment_id>") keyed with the key secret.
        if not signature:
            raise SignatureMismatchError()
        try:
            self.client.utility.verify_payment_signature(
                {
                    "razorpay_order_id": order_id,
                    "razorpay_payment_id": payment_id,
                    "razorpay_signature": signature,
                }
            )
        except SignatureVerificationError as exc:
            raise SignatureMismatchError() from exc
