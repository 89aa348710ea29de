"""permguard - continuous file permission enforcement."""

__version__ = "0.1.0"
