"""Hosted checkout payment correlation service."""

__version__ = "0.1.0"
