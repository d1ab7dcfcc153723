import hashlib
import hmac

from checkpoint.constant_file import TOKEN_SECRET


def sign_payload(payload: str, secret: str = TOKEN_SECRET):
    return hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()


def verify_signature(payload: str, signature: str, secret: str = TOKEN_SECRET):
    expected = sign_payload(payload, secret)
    return hmac.compare_digest(expected.encode(), signature.encode())
