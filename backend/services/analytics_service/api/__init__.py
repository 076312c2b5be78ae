"""Analytics service API layer."""
