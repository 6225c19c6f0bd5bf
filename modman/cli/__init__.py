"""Command-line interface for modman."""
