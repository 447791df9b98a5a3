"""LLM-backed insight generation for uploaded tabular datasets."""

__version__ = "0.1.0"
