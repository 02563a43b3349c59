"""Dependency injection."""

from panel_relay.DI.container import Container

__all__ = ["Container"]
