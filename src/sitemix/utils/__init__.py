"""Shared utilities: logging, geometry, solver selection, I/O and timing."""
