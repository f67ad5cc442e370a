"""Utility helpers for podfeed."""
