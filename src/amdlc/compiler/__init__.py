"""Build driver, options and cache."""
