"""Concatenate source trees into a single prompt-friendly document."""

__version__ = "0.2.2"
