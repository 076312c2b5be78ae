"""Meta Ads service endpoint modules."""
