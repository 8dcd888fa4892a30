"""Uniform async query interface over public transport network backends."""

__version__ = "0.1.0"
