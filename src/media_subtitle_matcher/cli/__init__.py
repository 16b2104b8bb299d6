"""Command-line interface for media subtitle matcher."""
