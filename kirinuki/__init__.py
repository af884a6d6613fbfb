"""Kirinuki: mark one or two crop regions per scanned page and batch-export them."""

__version__ = "0.1.0"
