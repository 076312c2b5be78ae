"""Version 1 of the analytics service API."""
