"""Plan limit gate: live row counts checked against the organization's plan."""
