"""Remote lookup providers."""
