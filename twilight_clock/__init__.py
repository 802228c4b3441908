"""Twilight Clock - 24-hour sun clock watchface with layered twilight bands."""

__version__ = "1.0.0"
