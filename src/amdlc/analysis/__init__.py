"""Module graph analysis."""
