"""Data access helpers backed by SQLite."""
