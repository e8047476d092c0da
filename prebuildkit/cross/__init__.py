"""
Cross-compilation support: target triples, platform tokens and tool overrides.
"""

from .targets import TargetTriple, map_platform
from .toolchain import ToolchainEnv, cargo_target_key, resolve_toolchain_env

__all__ = [
    "TargetTriple",
    "map_platform",
    "ToolchainEnv",
    "cargo_target_key",
    "resolve_toolchain_env",
]
