"""Syntax tree and text transforms applied while assembling bundles."""
