"""Partition transforms for columnar table data."""

__version__ = "0.1.0"
__all__ = ["transform"]