"""Offline address prediction for deterministic contract factories."""

__version__ = "0.1.0"
