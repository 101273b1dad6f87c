"""Organization identity helpers."""

import hashlib


def hash_api_key(api_key: str) -> str:
    """SHA-256 hex digest under which an API key is stored."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()
