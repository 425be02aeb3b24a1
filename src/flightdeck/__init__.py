"""Backend API for the Flying With Joel website."""

__version__ = "1.0.0"
