"""Logging subpackage."""
