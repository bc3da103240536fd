"""Single-location retail point of sale backed by a local SQLite file."""

__version__ = "1.4.0"
