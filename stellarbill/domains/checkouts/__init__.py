"""Checkouts and their on-chain settlement."""
