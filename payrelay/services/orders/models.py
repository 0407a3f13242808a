"""Order document model.

The Firestore `orders` collection is the source of truth for order state.
Field names are stored in camelCase.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from payrelay.common.state_machine import OrderStatus

PAYMENT_FIELDS = ("payment_id", "signature", "paid_at")


class OrderRecord(BaseModel):
    """Current state of one gateway order."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    order_id: str
    amount: int | float
    currency: str
    receipt: str
    user_data: dict[str, Any] | None = None
    cart_items: list[Any] | None = None
    status: OrderStatus = OrderStatus.CREATED
    created_at: str
    payment_id: str | None = None
    signature: str | None = None
    paid_at: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Serialize for the store, leaving unset payment fields out."""

        unset = {name for name in PAYMENT_FIELDS if getattr(self, name) is None}
        return self.model_dump(mode="json", by_alias=True, exclude=unset)
