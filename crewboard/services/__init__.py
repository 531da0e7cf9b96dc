"""Scheduling services built on the data access layer."""
