"""Svix adapter for inbound webhook verification.

Notifications to ``/stellar-webhook`` are signed with the standard-webhooks
scheme (``webhook-id``, ``webhook-timestamp``, ``webhook-signature``) using
the organization's signing secret. Verification, including the timestamp
tolerance that rejects replays of old deliveries, is delegated to svix.
"""

import logging
from typing import Mapping

from svix.webhooks import Webhook, WebhookVerificationError

from stellarbill.domains.webhooks.exceptions import InvalidSignatureError

logger = logging.getLogger(__name__)


class SvixSignatureVerifier:
    """WebhookSignatureVerifier backed by ``svix.webhooks.Webhook``."""

    def verify(self, secret: str, payload: bytes, headers: Mapping[str, str]) -> None:
        """Raise InvalidSignatureError unless ``payload`` is signed with ``secret``."""
        normalized = {k.lower(): v for k, v in headers.items()}
        try:
            Webhook(secret).verify(payload, normalized)
        except WebhookVerificationError as e:
            logger.info("Rejected webhook %s: %s", normalized.get("webhook-id"), e)
            raise InvalidSignatureError(str(e)) from e
