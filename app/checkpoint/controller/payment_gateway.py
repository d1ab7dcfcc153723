import logging
import secrets
import string
import time

import requests

from checkpoint.constant_file import (APP_DOMAIN,
                                      PAYSTACK_BASE_URL,
                                      PAYSTACK_SECRET_KEY,
                                      PAYSTACK_TIMEOUT)
from checkpoint.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.digits + string.ascii_uppercase


def generate_payment_reference(prefix: str = "EVT"):
    random_part = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(6))
    return f"{prefix}_{int(time.time() * 1000)}_{random_part}"


def convert_to_minor_units(amount):
    return int(round(float(amount) * 100))


def convert_from_minor_units(amount):
    return amount / 100


class PaystackGateway:
    """Paystack transaction API: open a checkout session, verify a reference."""

    def __init__(self, secret_key: str = PAYSTACK_SECRET_KEY, base_url: str = PAYSTACK_BASE_URL,
                 callback_url: str = f"{APP_DOMAIN}/payment/callback", timeout: int = PAYSTACK_TIMEOUT):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.callback_url = callback_url
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs):
        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }
        try:
            response = requests.request(method, f"{self.base_url}{path}", headers=headers,
                                        timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.exception(f"Paystack {method} {path} failed")
            raise PaymentGatewayError(f"Payment gateway unreachable: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise PaymentGatewayError(f"Invalid gateway response ({response.status_code})") from e
        return data

    def initialize_payment(self, email: str, amount: int, reference: str, metadata: dict = None,
                           subaccount: str = None):
        body = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "metadata": metadata or {},
            "callback_url": self.callback_url,
        }
        if subaccount:
            body["subaccount"] = subaccount

        data = self._request("POST", "/transaction/initialize", json=body)
        if not data.get("status"):
            logger.error(f"Paystack refused reference {reference}: {data.get('message')}")
            raise PaymentGatewayError(data.get("message") or "Payment initialization failed", data)
        return data["data"]

    def verify_payment(self, reference: str):
        data = self._request("GET", f"/transaction/verify/{reference}")
        if not data.get("status"):
            raise PaymentGatewayError(data.get("message") or "Payment verification failed", data)
        return data["data"]


def get_payment_gateway():
    return PaystackGateway()
