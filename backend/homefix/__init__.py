"""HomeFix marketplace backend: booking lifecycle and rating aggregation."""

__version__ = "0.4.0"
