"""Helpers shared across packages (logging, datetime)."""
