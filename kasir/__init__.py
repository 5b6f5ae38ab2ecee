"""Kasir: point-of-sale pricing, checkout and sales reporting."""

__version__ = "1.0.0"
