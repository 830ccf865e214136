"""Shared utilities: exception hierarchy and logging setup."""
