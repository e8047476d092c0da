"""
Core functionality for prebuildkit.

This package contains the foundational modules that other components depend on.
"""

from .exceptions import (
    PrebuildKitError,
    MissingEnvironmentError,
    InvalidEnvironmentError,
    ManifestError,
    FetchError,
    PatchError,
    BuildError,
    BuildStepError,
    InterpreterNotFoundError,
)

from .environment import BuildEnvironment

__all__ = [
    "PrebuildKitError",
    "MissingEnvironmentError",
    "InvalidEnvironmentError",
    "ManifestError",
    "FetchError",
    "PatchError",
    "BuildError",
    "BuildStepError",
    "InterpreterNotFoundError",
    "BuildEnvironment",
]
