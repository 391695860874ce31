"""Bundled data files (default console theme)."""
