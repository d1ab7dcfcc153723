class TokenDecodeError(ValueError):
    """Raised when a QR token is not valid base64/JSON or its signature does not match."""


class PaymentGatewayError(RuntimeError):
    """Raised when the payment gateway cannot be reached or refuses a request."""

    def __init__(self, message, response=None):
        super().__init__(message)
        self.response = response
