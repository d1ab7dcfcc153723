import base64
import binascii
import json
import logging
import secrets
import string
from datetime import datetime, timedelta
from io import BytesIO
from typing import Optional

import qrcode
from pydantic import ValidationError

from checkpoint.constant_file import EVENT_GRACE_HOURS, TOKEN_MAX_AGE_DAYS
from checkpoint.exceptions import TokenDecodeError
from checkpoint.schema.token_schema import TokenPayload
from checkpoint.signing import sign_payload, verify_signature

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1)
SHORT_CODE_ALPHABET = string.ascii_uppercase
TICKET_NUMBER_ALPHABET = string.digits + string.ascii_uppercase


def epoch_ms(moment: datetime):
    return int((moment - EPOCH) / timedelta(milliseconds=1))


def from_epoch_ms(value: int):
    return EPOCH + timedelta(milliseconds=value)


# ------------------ Mint tokens and codes ------------------
def encode_token(payload: TokenPayload):
    body = json.dumps(payload.model_dump(by_alias=True), separators=(",", ":"))
    encoded = base64.b64encode(body.encode("utf-8")).decode("ascii")
    return f"{encoded}.{sign_payload(encoded)}"


def mint_token(registration_id: int, event_id: int, member_id: Optional[int], kind: str,
               issued_at: Optional[datetime] = None):
    payload = TokenPayload(
        registration_id=registration_id,
        event_id=event_id,
        member_id=member_id,
        kind=kind,
        issued_at=epoch_ms(issued_at or datetime.utcnow()),
    )
    return encode_token(payload)


def mint_short_code():
    # Uniqueness is checked by the caller against the store.
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(6))


def mint_ticket_number():
    return "TKT" + "".join(secrets.choice(TICKET_NUMBER_ALPHABET) for _ in range(6))


def mint_qr_reference():
    return secrets.token_hex(16)


# ------------------ Decode and expiry ------------------
def decode_token(token: str):
    """Return the payload of a signed token.

    Raises TokenDecodeError when the token is not ``<base64 json>.<signature>``
    or the signature does not match. Payloads that decode cleanly but point at
    unknown registrations are returned as-is for the caller to reject.
    """
    if not token or "." not in token:
        raise TokenDecodeError("Token is not signed")

    encoded, signature = token.strip().rsplit(".", 1)
    if not verify_signature(encoded, signature):
        raise TokenDecodeError("Token signature mismatch")

    try:
        body = base64.b64decode(encoded, validate=True).decode("utf-8")
        data = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise TokenDecodeError(f"Malformed token: {e}") from e

    if not isinstance(data, dict):
        raise TokenDecodeError("Token payload is not an object")

    try:
        return TokenPayload.model_validate(data)
    except ValidationError as e:
        raise TokenDecodeError(f"Malformed token payload: {e}") from e


def is_token_live(payload: TokenPayload, event_end_date: Optional[datetime] = None,
                  now: Optional[datetime] = None):
    if not payload.issued_at:
        return True

    now = now or datetime.utcnow()
    if event_end_date is not None:
        return now <= event_end_date + timedelta(hours=EVENT_GRACE_HOURS)

    return now <= from_epoch_ms(payload.issued_at) + timedelta(days=TOKEN_MAX_AGE_DAYS)


# ------------------ QR image ------------------
def generate_qr_image(data: str):
    qr_img = qrcode.make(data)
    buffered = BytesIO()
    qr_img.save(buffered, format="PNG")
    return base64.b64encode(buffered.getvalue()).decode("utf-8")
