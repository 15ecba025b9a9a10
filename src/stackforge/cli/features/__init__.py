"""Feature catalog commands."""
