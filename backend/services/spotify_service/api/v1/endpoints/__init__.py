"""Spotify service endpoint modules."""
