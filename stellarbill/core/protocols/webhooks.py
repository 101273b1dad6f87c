"""Inbound webhook signature verification protocol."""

from typing import Mapping, Protocol, runtime_checkable


@runtime_checkable
class WebhookSignatureVerifier(Protocol):
    """Verify that an inbound notification was signed with an organization's secret.

    Implementations raise InvalidSignatureError (domains.webhooks.exceptions)
    on any verification failure, including missing headers.
    """

    def verify(self, secret: str, payload: bytes, headers: Mapping[str, str]) -> None:
        """Verify ``payload`` against ``headers`` using ``secret``."""
        ...
