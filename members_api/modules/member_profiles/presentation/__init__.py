"""HTTP presentation layer for member profiles."""
