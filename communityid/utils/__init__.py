"""Shared helpers for logging and error reporting."""
