"""Core infrastructure: paths and logging setup."""
