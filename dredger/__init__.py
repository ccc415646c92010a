"""Dredger.

Reads a GitHub repository into a token-annotated tree and generates
per-file documentation comments with a local language model.
"""

__version__ = "0.1.0"
