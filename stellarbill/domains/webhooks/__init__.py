"""Inbound chain webhooks."""
