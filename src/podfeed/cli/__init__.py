"""Command-line interface for podfeed."""
