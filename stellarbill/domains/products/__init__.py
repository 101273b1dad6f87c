"""Products (read side)."""
