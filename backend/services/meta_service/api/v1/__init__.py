"""Version 1 of the Meta Ads service API."""
