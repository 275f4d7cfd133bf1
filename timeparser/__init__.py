"""Time entry parser: free-text time tracking to structured entries."""

__version__ = "0.1.0"
