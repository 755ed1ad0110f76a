"""Live USB device dashboard with serial terminal correlation."""

__version__ = "0.1.0"
