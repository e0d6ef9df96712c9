"""Core module - settings, auth, errors, logging and validation helpers."""
