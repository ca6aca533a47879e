"""Member profiles domain layer."""
