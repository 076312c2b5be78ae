"""Spotify service API layer."""
