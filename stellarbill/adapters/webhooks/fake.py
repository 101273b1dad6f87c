"""Fake webhook signature verifier for testing."""

from typing import Mapping

from stellarbill.domains.webhooks.exceptions import InvalidSignatureError

VALID_SIGNATURE = "v1,valid"


class FakeWebhookSignatureVerifier:
    """Accepts exactly the headers tests mark as valid.

    A request verifies when ``webhook-signature`` equals VALID_SIGNATURE and
    the secret is one the test registered with ``allow()``.
    """

    def __init__(self) -> None:
        """Initialize with no trusted secrets."""
        self._secrets: set[str] = set()
        self.verified: list[bytes] = []

    def allow(self, secret: str) -> None:
        """Trust ``secret``."""
        self._secrets.add(secret)

    def verify(self, secret: str, payload: bytes, headers: Mapping[str, str]) -> None:
        """Raise InvalidSignatureError unless secret and signature are trusted."""
        if secret not in self._secrets or headers.get("webhook-signature") != VALID_SIGNATURE:
            raise InvalidSignatureError()
        self.verified.append(payload)
