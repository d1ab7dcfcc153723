import re
from unittest.mock import Mock, patch

import pytest
import requests

from checkpoint.controller.payment_gateway import (PaystackGateway, convert_from_minor_units,
                                                   convert_to_minor_units, generate_payment_reference)
from checkpoint.exceptions import PaymentGatewayError


def _response(payload, status_code=200):
    response = Mock(status_code=status_code)
    response.json.return_value = payload
    return response


@pytest.fixture
def gateway():
    return PaystackGateway(secret_key="sk_test_123", base_url="https://api.paystack.test/",
                           callback_url="https://app.test/payment/callback", timeout=5)


class TestHelpers:
    def test_reference_format(self):
        assert re.fullmatch(r"TKT7_\d+_[0-9A-Z]{6}", generate_payment_reference("TKT7"))

    def test_minor_units(self):
        assert convert_to_minor_units(49.99) == 4999
        assert convert_to_minor_units("1500") == 150000
        assert convert_from_minor_units(4999) == 49.99


class TestPaystackGateway:
    def test_initialize_payment(self, gateway):
        session = {"authorization_url": "https://checkout.paystack.test/x", "reference": "R1"}
        with patch("checkpoint.controller.payment_gateway.requests.request",
                   return_value=_response({"status": True, "data": session})) as request:
            result = gateway.initialize_payment("buyer@example.com", 500000, "R1", {"ticketId": 3})

        assert result == session
        method, url = request.call_args.args
        assert method == "POST"
        assert url == "https://api.paystack.test/transaction/initialize"
        kwargs = request.call_args.kwargs
        assert kwargs["headers"]["Authorization"] == "Bearer sk_test_123"
        assert kwargs["json"]["amount"] == 500000
        assert kwargs["json"]["callback_url"] == "https://app.test/payment/callback"
        assert kwargs["timeout"] == 5

    def test_refused_initialization_raises(self, gateway):
        with patch("checkpoint.controller.payment_gateway.requests.request",
                   return_value=_response({"status": False, "message": "Invalid key"}, 401)):
            with pytest.raises(PaymentGatewayError, match="Invalid key") as exc:
                gateway.initialize_payment("buyer@example.com", 100, "R2")

        assert exc.value.response["status"] is False

    def test_network_error_raises(self, gateway):
        with patch("checkpoint.controller.payment_gateway.requests.request",
                   side_effect=requests.ConnectionError("boom")):
            with pytest.raises(PaymentGatewayError):
                gateway.verify_payment("R3")

    def test_non_json_response_raises(self, gateway):
        response = Mock(status_code=502)
        response.json.side_effect = ValueError("no json")
        with patch("checkpoint.controller.payment_gateway.requests.request", return_value=response):
            with pytest.raises(PaymentGatewayError):
                gateway.verify_payment("R4")

    def test_verify_payment(self, gateway):
        data = {"status": "success", "amount": 500000, "metadata": {"ticketId": 3}}
        with patch("checkpoint.controller.payment_gateway.requests.request",
                   return_value=_response({"status": True, "data": data})) as request:
            assert gateway.verify_payment("R5") == data

        assert request.call_args.args == ("GET", "https://api.paystack.test/transaction/verify/R5")
