"""Subscriptions and the recurring charge sweep."""
