"""
Command-line interface for Twig.
"""

from .main import cli

__all__ = ["cli"]
