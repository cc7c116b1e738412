"""Shared infrastructure: settings, database, logging and errors."""
