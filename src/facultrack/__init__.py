"""Facultrack: faculty achievement review and points accounting."""

__version__ = "0.1.0"
