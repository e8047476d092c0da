"""
prebuildkit command-line entry point.
"""

from .main import configure_logging, main, run

__all__ = ["configure_logging", "main", "run"]
