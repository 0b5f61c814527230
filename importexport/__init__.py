"""Bag profile loading and validation for repository import/export."""

__version__ = "0.1.0"
