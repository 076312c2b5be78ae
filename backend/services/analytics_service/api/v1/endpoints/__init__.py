"""Analytics service endpoint modules."""
