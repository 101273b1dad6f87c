"""Event log: every published domain event is appended to the event table."""
