"""Organization identity: API keys, chain accounts and webhook signing secrets."""
