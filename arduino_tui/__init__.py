"""Curses interface and async arduino-cli wrappers for browsing, installing and removing Arduino libraries."""

__version__ = "0.1.1"

__all__ = ["__version__"]