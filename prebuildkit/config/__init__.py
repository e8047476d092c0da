"""Dependency manifest configuration for prebuildkit."""

from .manifest import (
    DEFAULT_MANIFEST,
    DependencyManifest,
    DriverConfig,
    FeatureRule,
    PatchConfig,
    SecondaryConfig,
    load_manifest,
    parse_manifest,
)

__all__ = [
    "DEFAULT_MANIFEST",
    "DependencyManifest",
    "DriverConfig",
    "FeatureRule",
    "PatchConfig",
    "SecondaryConfig",
    "load_manifest",
    "parse_manifest",
]
