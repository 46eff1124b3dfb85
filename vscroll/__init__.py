"""Viewport windowing for very large collections in PySide6 scroll areas."""

__version__ = "0.3.0"
