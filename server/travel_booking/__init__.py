"""Travel booking service: booking and payment lifecycle."""

__version__ = "1.0.0"
