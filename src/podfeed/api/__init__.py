"""HTTP API for podfeed."""
