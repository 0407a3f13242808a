"""Razorpay gateway wrapper: payload shape, error translation, signatures."""

import hashlib
import hmac
from unittest.mock import MagicMock

import pytest
import razorpay

from payrelay.common.config import Settings
from payrelay.common.errors import ConfigurationError, GatewayError, SignatureMismatchError
from payrelay.common.gateway import RazorpayGateway

SECRET = "s3cr3t"


@pytest.fixture
def real_gateway() -> RazorpayGateway:
    return RazorpayGateway(razorpay.Client(auth=("rzp_test_abc", SECRET)))


def test_create_order_payload():
    client = MagicMock()
    client.order.create.return_value = {"id": "order_1", "amount": 50000, "currency": "INR"}

    order = RazorpayGateway(client).create_order(50000, "INR", "rcpt_1")

    client.order.create.assert_called_once_with(data={"amount": 50000, "currency": "INR", "receipt": "rcpt_1"})
    assert order["id"] == "order_1"


def test_create_order_sdk_error_is_wrapped():
    client = MagicMock()
    client.order.create.side_effect = razorpay.errors.BadRequestError("Authentication failed")

    with pytest.raises(GatewayError) as excinfo:
        RazorpayGateway(client).create_order(100, "INR", "rcpt_1")

    assert excinfo.value.message == "Order creation failed"
    assert isinstance(excinfo.value.__cause__, razorpay.errors.BadRequestError)


def test_create_order_without_id_is_an_error():
    client = MagicMock()
    client.order.create.return_value = {"error": {"code": "BAD_REQUEST_ERROR"}}

    with pytest.raises(GatewayError):
        RazorpayGateway(client).create_order(100, "INR", "rcpt_1")


def test_valid_signature_passes(real_gateway):
    signature = hmac.new(SECRET.encode(), b"order_abc|pay_123", hashlib.sha256).hexdigest()

    real_gateway.verify_signature("order_abc", "pay_123", signature)


@pytest.mark.parametrize("signature", ["", "sig_xyz"])
def test_invalid_signature_rejected(real_gateway, signature):
    with pytest.raises(SignatureMismatchError):
        real_gateway.verify_signature("order_abc", "pay_123", signature)


def test_from_settings_requires_credentials():
    with pytest.raises(ConfigurationError):
        RazorpayGateway.from_settings(Settings(_env_file=None, razorpay_key_id="", razorpay_key_secret=""))


def test_from_settings_builds_authenticated_client():
    gateway = RazorpayGateway.from_settings(
        Settings(_env_file=None, razorpay_key_id="rzp_test_abc", razorpay_key_secret=SECRET, service_name="relay-test")
    )

    assert gateway.client.auth == ("rzp_test_abc", SECRET)
    assert gateway.service_name == "relay-test"
