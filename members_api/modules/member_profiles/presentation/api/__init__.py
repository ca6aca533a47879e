"""Profile API routers."""
