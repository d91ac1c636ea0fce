"""Utility modules for benefits2ofx."""

from .file import write_output

__all__ = ["write_output"]
