"""Relay error hierarchy.

Every error carries the HTTP status and the message that is safe to show a
caller. Downstream failures keep the real cause on `__cause__` for logging
and expose only a generic message.
"""


class RelayError(Exception):
    """Base exception rendered as `{success: false, error}` at the HTTP boundary."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"success": False, "error": self.message}


class InvalidRequestError(RelayError):
    """A required field is missing or malformed."""

    status_code = 400


class SignatureMismatchError(RelayError):
    """Payment signature does not match the gateway's scheme."""

    status_code = 400

    def __init__(self, message: str = "Invalid payment signature") -> None:
        super().__init__(message)


class OrderNotFoundError(RelayError):
    status_code = 404

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__("Order not found")


class OrderAlreadyPaidError(RelayError):
    status_code = 409

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__("Order already paid")


class ConcurrentUpdateError(RelayError):
    """The order document changed between read and guarded write."""

    status_code = 409

    def __init__(self, order_id: str) -> None:
        self.order_id = order_id
        super().__init__("Order was modified concurrently")


class DownstreamError(RelayError):
    """A gateway or store call failed; details stay in server logs."""

    status_code = 500


class GatewayError(DownstreamError):
    pass


class StoreError(DownstreamError):
    pass


class ConfigurationError(RuntimeError):
    """Required credentials are missing at startup."""
