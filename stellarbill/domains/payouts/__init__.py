"""Merchant payouts."""
