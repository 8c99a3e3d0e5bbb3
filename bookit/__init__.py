"""bookit: booking availability and checkout engine."""

__version__ = "0.1.0"
