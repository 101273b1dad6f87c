"""Concrete implementations of core infrastructure protocols."""
