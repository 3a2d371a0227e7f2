"""Symbolic analysis of Bitcoin scripts: parsing, simplification and spending paths."""

__version__ = "0.1.0"