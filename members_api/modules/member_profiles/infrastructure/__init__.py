"""Infrastructure adapters for member profiles."""
