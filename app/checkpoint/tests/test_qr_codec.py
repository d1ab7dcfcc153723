import base64
import json
import re
from datetime import datetime, timedelta

import pytest

from checkpoint.controller.qr_codec import (decode_token, encode_token, epoch_ms, generate_qr_image,
                                            is_token_live, mint_qr_reference, mint_short_code,
                                            mint_ticket_number, mint_token)
from checkpoint.exceptions import TokenDecodeError
from checkpoint.schema.token_schema import TokenPayload
from checkpoint.signing import sign_payload


def _signed(body: str, secret: str = "test-secret"):
    encoded = base64.b64encode(body.encode()).decode()
    return f"{encoded}.{sign_payload(encoded, secret)}"


class TestTokenEncoding:
    def test_minted_token_decodes_to_same_fields(self):
        issued = datetime(2026, 3, 1, 9, 30)
        token = mint_token(12, 4, 7, "member", issued_at=issued)

        payload = decode_token(token)

        assert payload.registration_id == 12
        assert payload.event_id == 4
        assert payload.member_id == 7
        assert payload.kind == "member"
        assert payload.issued_at == epoch_ms(issued)

    def test_payload_uses_wire_field_names(self):
        token = mint_token(1, 2, None, "guest")
        body = json.loads(base64.b64decode(token.split(".")[0]))

        assert set(body) == {"registrationId", "eventId", "memberId", "type", "timestamp"}
        assert body["memberId"] is None

    def test_tampered_payload_is_rejected(self):
        token = mint_token(1, 2, None, "guest")
        encoded, signature = token.split(".")
        forged = base64.b64encode(json.dumps({"registrationId": 99, "eventId": 2}).encode()).decode()

        with pytest.raises(TokenDecodeError):
            decode_token(f"{forged}.{signature}")

    def test_token_signed_with_another_secret_is_rejected(self):
        with pytest.raises(TokenDecodeError):
            decode_token(_signed('{"registrationId":1,"eventId":2}', secret="someone-else"))

    @pytest.mark.parametrize("raw", ["", "not a token", "eyJhIjoxfQ==", "abc.def", "ab.éé"])
    def test_garbage_is_rejected(self, raw):
        with pytest.raises(TokenDecodeError):
            decode_token(raw)

    def test_signed_non_object_payload_is_rejected(self):
        with pytest.raises(TokenDecodeError):
            decode_token(_signed("[1, 2, 3]"))

    def test_signed_payload_with_wrong_types_is_rejected(self):
        with pytest.raises(TokenDecodeError):
            decode_token(_signed('{"registrationId":"abc","eventId":2}'))

    def test_missing_timestamp_decodes_as_legacy(self):
        payload = decode_token(_signed('{"registrationId":3,"eventId":2,"type":"member"}'))

        assert payload.issued_at == 0


class TestTokenExpiry:
    def test_legacy_token_is_always_live(self):
        payload = TokenPayload(registration_id=1, event_id=1, issued_at=0)

        assert is_token_live(payload, datetime(2000, 1, 1), now=datetime(2030, 1, 1))

    def test_event_end_date_plus_grace_bounds_liveness(self):
        end = datetime(2026, 5, 10, 18, 0)
        payload = TokenPayload(registration_id=1, event_id=1, issued_at=epoch_ms(end - timedelta(days=90)))

        assert is_token_live(payload, end, now=end + timedelta(hours=23))
        assert is_token_live(payload, end, now=end + timedelta(hours=24))
        assert not is_token_live(payload, end, now=end + timedelta(hours=25))

    def test_without_end_date_token_lives_thirty_days(self):
        issued = datetime(2026, 1, 1)
        payload = TokenPayload(registration_id=1, event_id=1, issued_at=epoch_ms(issued))

        assert is_token_live(payload, None, now=issued + timedelta(days=29))
        assert not is_token_live(payload, None, now=issued + timedelta(days=31))


class TestMintedCodes:
    def test_short_code_is_six_uppercase_letters(self):
        for _ in range(50):
            assert re.fullmatch(r"[A-Z]{6}", mint_short_code())

    def test_ticket_number_format(self):
        assert re.fullmatch(r"TKT[0-9A-Z]{6}", mint_ticket_number())

    def test_qr_reference_is_128_bit_hex(self):
        assert re.fullmatch(r"[0-9a-f]{32}", mint_qr_reference())

    def test_qr_image_is_png(self):
        image = base64.b64decode(generate_qr_image(mint_token(1, 1, None, "guest")))

        assert image.startswith(b"\x89PNG")

    def test_encode_token_matches_mint_token(self):
        issued = datetime(2026, 2, 2)
        payload = TokenPayload(registration_id=5, event_id=6, member_id=None, kind="invitee",
                               issued_at=epoch_ms(issued))

        assert encode_token(payload) == mint_token(5, 6, None, "invitee", issued_at=issued)
