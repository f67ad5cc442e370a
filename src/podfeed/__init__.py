"""podfeed - podcast feed gateway."""

__version__ = "0.1.0"
