"""Job board API."""
