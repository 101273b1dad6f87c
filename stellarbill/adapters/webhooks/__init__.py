"""Inbound webhook signature verification adapters."""

from stellarbill.adapters.webhooks.fake import FakeWebhookSignatureVerifier
from stellarbill.adapters.webhooks.svix import SvixSignatureVerifier

__all__ = ["FakeWebhookSignatureVerifier", "SvixSignatureVerifier"]
