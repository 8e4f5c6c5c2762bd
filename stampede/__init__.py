"""Stampede — scaffold new Go web applications."""

__version__ = "0.1.0"
