"""Refunds of confirmed payments."""
