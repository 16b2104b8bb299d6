"""Automatic subtitle matching for media directories."""

__version__ = "0.1.0"
