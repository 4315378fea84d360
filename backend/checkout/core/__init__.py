"""Core settings, logging and exceptions."""
