"""site-search: full-text search for static-site posts."""

__version__ = "0.1.0"
