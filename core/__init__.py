"""Shared constants and configuration data."""
