"""Task dependency graph with derived task status."""

__version__ = "0.1.0"
