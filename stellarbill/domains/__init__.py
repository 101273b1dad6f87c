"""Domain packages, one per billing component."""
