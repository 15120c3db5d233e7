"""coins-oracle: one query surface over many blockchain node protocols."""

__version__ = "0.1.0"
