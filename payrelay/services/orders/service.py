"""Order intake and payment confirmation logic.

Owns the request validation rules and the `created -> paid` transition.
The gateway and store are injected so the HTTP layer never touches SDK
globals.
"""

from datetime import datetime, timezone
from typing import Callable

from payrelay.common.config import Settings
from payrelay.common.currency import to_minor_units
from payrelay.common.errors import (
    InvalidRequestError,
    OrderAlreadyPaidError,
    OrderNotFoundError,
    RelayError,
    StoreError,
)
from payrelay.common.gateway import PaymentGateway
from payrelay.common.logging import logger, order_id_ctx
from payrelay.common.metrics import orders_created_total, payments_verified_total
from payrelay.common.state_machine import InvalidTransition, OrderStatus, validate_transition
from payrelay.common.store import OrderStore
from payrelay.services.orders.models import OrderRecord
from payrelay.services.orders.schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderService:
    """Relays order creation to the gateway and records order state."""

    def __init__(
        self,
        gateway: PaymentGateway,
        store: OrderStore,
        cfg: Settings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.gateway = gateway
        self.store = store
        self.cfg = cfg
        self.clock = clock

    def _currency(self, requested: str | None) -> str:
        currency = (requested or self.cfg.default_currency).upper()
        if len(currency) != 3 or not currency.isalpha():
            raise InvalidRequestError("Invalid currency")
        return currency

    def create_order(self, req: CreateOrderRequest) -> CreateOrderResponse:
        """Create a gateway order for `req.amount` and store it as `created`.

        Not idempotent: every call creates a new gateway order.
        """

        if req.amount is None:
            raise InvalidRequestError("Amount is required")
        currency = self._currency(req.currency)
        try:
            amount_minor = to_minor_units(req.amount, currency, self.cfg.currency_exponents)
        except ValueError as exc:
            raise InvalidRequestError("Invalid amount") from exc
        if amount_minor <= 0:
            raise InvalidRequestError("Amount must be greater than zero")

        now = self.clock()
        receipt = req.receipt or f"rcpt_{int(now.timestamp() * 1000)}"
        order = self.gateway.create_order(amount_minor, currency, receipt)
        order_id = order["id"]
        order_id_ctx.set(order_id)

        record = OrderRecord(
            order_id=order_id,
            amount=req.amount,
            currency=currency,
            receipt=receipt,
            user_data=req.user_data,
            cart_items=req.cart_items,
            status=OrderStatus.CREATED,
            created_at=now.isoformat(),
        )
        try:
            self.store.create(order_id, record.to_document())
        except StoreError:
            # The gateway order exists without a local record; keep the id for reconciliation.
            logger.error("order_persist_failed order_id=%s amount_minor=%s", order_id, amount_minor)
            raise

        orders_created_total.labels(service=self.cfg.service_name).inc()
        logger.info("order_created order_id=%s amount_minor=%s currency=%s", order_id, amount_minor, currency)
        return CreateOrderResponse(
            order_id=order_id,
            amount=order.get("amount", amount_minor),
            currency=order.get("currency", currency),
        )

    def verify_payment(self, req: VerifyPaymentRequest) -> VerifyPaymentResponse:
        """Mark an existing `created` order as paid.

        The checkout signature is checked first (unless disabled), then the
        write is guarded against concurrent modification of the same order.
        """

        if not req.order_id or not req.payment_id:
            raise InvalidRequestError("Missing payment data")
        order_id_ctx.set(req.order_id)

        if self.cfg.verify_signatures:
            self.gateway.verify_signature(req.order_id, req.payment_id, req.signature or "")

        stored = self.store.get(req.order_id)
        if stored is None:
            raise OrderNotFoundError(req.order_id)

        current = stored.data.get("status", "")
        try:
            validate_transition(current, OrderStatus.PAID)
        except InvalidTransition as exc:
            if current == OrderStatus.PAID.value:
                raise OrderAlreadyPaidError(req.order_id) from exc
            raise RelayError("Order cannot be marked paid", status_code=409) from exc

        self.store.update(
            req.order_id,
            {
                "paymentId": req.payment_id,
                "signature": req.signature,
                "status": OrderStatus.PAID.value,
                "paidAt": self.clock().isoformat(),
            },
            expected_version=stored.version,
        )
        payments_verified_total.labels(service=self.cfg.service_name).inc()
        logger.info("payment_verified order_id=%s payment_id=%s", req.order_id, req.payment_id)
        return VerifyPaymentResponse()
