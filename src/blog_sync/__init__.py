"""Bidirectional synchronizer between a Markdown post directory and a blog."""

__version__ = "0.3.0"
