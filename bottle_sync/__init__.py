"""Engagement count synchronization for content-addressed bottles."""

__version__ = "0.1.0"
