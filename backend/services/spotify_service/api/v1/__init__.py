"""Version 1 of the Spotify service API."""
