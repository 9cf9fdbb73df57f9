"""Time clock engine: soft cap time accounting and pay period earnings."""

__version__ = "0.1.0"
