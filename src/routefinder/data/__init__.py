"""Storage repositories."""
