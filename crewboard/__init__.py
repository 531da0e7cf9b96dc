"""Crewboard: technician and contractor scheduling grid."""

from .app import create_app

__all__ = ["create_app"]
