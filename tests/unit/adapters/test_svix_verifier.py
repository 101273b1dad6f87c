"""Unit tests for SvixSignatureVerifier against real svix signatures."""

from datetime import datetime, timedelta, timezone

import pytest
from svix.webhooks import Webhook

from stellarbill.adapters.webhooks.svix import SvixSignatureVerifier
from stellarbill.domains.webhooks.exceptions import InvalidSignatureError

SECRET = "whsec_MfKQ9r8GKYqrTwjUPD8ILPZIo2LaLaSw"
OTHER_SECRET = "whsec_C2FVsBQIhrscChlQIMV+b5sSYspob7oD"
PAYLOAD = b'{"apiKey":"sk_test","checkoutId":"ck_1"}'


def _headers(secret: str = SECRET, sent_at: datetime | None = None) -> dict[str, str]:
    sent_at = sent_at or datetime.now(timezone.utc)
    signature = Webhook(secret).sign("msg_1", sent_at, PAYLOAD.decode())
    return {
        "Webhook-Id": "msg_1",
        "Webhook-Timestamp": str(int(sent_at.timestamp())),
        "Webhook-Signature": signature,
    }


def test_valid_signature_passes():
    SvixSignatureVerifier().verify(SECRET, PAYLOAD, _headers())


def test_signature_from_another_secret_is_rejected():
    with pytest.raises(InvalidSignatureError):
        SvixSignatureVerifier().verify(SECRET, PAYLOAD, _headers(secret=OTHER_SECRET))


def test_tampered_payload_is_rejected():
    with pytest.raises(InvalidSignatureError):
        SvixSignatureVerifier().verify(SECRET, PAYLOAD + b" ", _headers())


def test_stale_delivery_is_rejected():
    stale = datetime.now(timezone.utc) - timedelta(hours=1)

    with pytest.raises(InvalidSignatureError):
        SvixSignatureVerifier().verify(SECRET, PAYLOAD, _headers(sent_at=stale))


def test_missing_headers_are_rejected():
    with pytest.raises(InvalidSignatureError):
        SvixSignatureVerifier().verify(SECRET, PAYLOAD, {})
