"""Meta Ads service API layer."""
