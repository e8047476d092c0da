"""Link directive emission for the enclosing build."""

from .emitter import APPLE_FRAMEWORKS, LinkEmitter

__all__ = ["APPLE_FRAMEWORKS", "LinkEmitter"]
