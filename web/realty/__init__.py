"""Real-estate franchise API."""

__version__ = "1.0.0"
