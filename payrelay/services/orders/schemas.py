"""API request/response schemas for the order endpoints.

Request fields are all optional at the schema level; required-field checks
happen in `OrderService` so missing values get the relay's own 400 messages.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateOrderRequest(CamelModel):
    """Payload accepted by `POST /create-order`; amount is in major units."""

    amount: int | float | None = None
    currency: str | None = None
    receipt: str | None = None
    user_data: dict[str, Any] | None = None
    cart_items: list[Any] | None = None

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_boolean_amount(cls, value: Any) -> Any:
        # JSON true/false would otherwise coerce to 1/0.
        if isinstance(value, bool):
            raise ValueError("amount must be a number")
        return value


class CreateOrderResponse(CamelModel):
    """Gateway's view of the new order; `amount` is in minor units."""

    success: bool = True
    order_id: str
    amount: int
    currency: str


class VerifyPaymentRequest(CamelModel):
    """Payload accepted by `POST /verify-payment` after client checkout."""

    order_id: str | None = None
    payment_id: str | None = None
    signature: str | None = None


class VerifyPaymentResponse(CamelModel):
    success: bool = True
    message: str = "Payment verified successfully!"


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    correlation_id: str | None = None
