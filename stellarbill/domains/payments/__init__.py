"""Payments (settled charges)."""
