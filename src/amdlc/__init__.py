"""amdlc - bundler for define()-declared JavaScript modules."""

__version__ = "1.0.0"
