"""
Ambient build context for prebuildkit.

The enclosing build communicates with the orchestrator exclusively through
environment variables. ``BuildEnvironment.from_environ`` reads all of them
once at startup; every component receives the resulting snapshot instead of
consulting ``os.environ`` itself.

Variables:
    OUT_DIR      Root of the persisted source/build trees (required)
    TARGET       Target triple being built for (required)
    PROFILE      Build profile, 'debug' or 'release' (required)
    NUM_JOBS     Parallel job count handed to the driver (required)
    HOST         Host triple (optional, defaults to TARGET)
    CARGO_FEATURE_<NAME>
                 One variable per enabled feature; ``WITH_FFTW3`` maps to
                 the feature name ``with-fftw3``
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Mapping, Optional

from prebuildkit.core.exceptions import MissingEnvironmentError

logger = logging.getLogger(__name__)

FEATURE_PREFIX = "CARGO_FEATURE_"

REQUIRED_VARIABLES = ("OUT_DIR", "TARGET", "PROFILE", "NUM_JOBS")


def feature_name(variable: str) -> str:
    """
    Convert a feature variable name into a feature name.

    Example:
        >>> feature_name("CARGO_FEATURE_WITH_FFTW3")
        'with-fftw3'
    """
    return variable[len(FEATURE_PREFIX) :].lower().replace("_", "-")


@dataclass(frozen=True)
class BuildEnvironment:
    """
    Snapshot of the ambient build context.

    Attributes:
        out_dir: Root directory for sources, build trees and installs
        target: Target triple string
        host: Host triple string
        profile: Build profile ('debug' or 'release')
        num_jobs: Parallel job count
        features: Names of the enabled features
        environ: Full environment captured at startup
    """

    out_dir: Path
    target: str
    host: str
    profile: str
    num_jobs: int
    features: FrozenSet[str] = frozenset()
    environ: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_environ(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "BuildEnvironment":
        """
        Read the build context from an environment mapping.

        Args:
            environ: Mapping to read (default: a copy of os.environ)

        Returns:
            BuildEnvironment snapshot

        Raises:
            MissingEnvironmentError: If a required variable is not set
        """
        if environ is None:
            environ = os.environ
        snapshot: Dict[str, str] = dict(environ)

        for variable in REQUIRED_VARIABLES:
            if not snapshot.get(variable):
                raise MissingEnvironmentError(variable)

        try:
            num_jobs = int(snapshot["NUM_JOBS"])
        except ValueError:
            logger.warning(
                f"NUM_JOBS is not an integer ({snapshot['NUM_JOBS']!r}), using 1"
            )
            num_jobs = 1

        features = frozenset(
            feature_name(name)
            for name in snapshot
            if name.startswith(FEATURE_PREFIX)
        )

        env = cls(
            out_dir=Path(snapshot["OUT_DIR"]),
            target=snapshot["TARGET"],
            host=snapshot.get("HOST") or snapshot["TARGET"],
            profile=snapshot["PROFILE"],
            num_jobs=max(num_jobs, 1),
            features=features,
            environ=snapshot,
        )
        logger.debug(
            f"Build environment: target={env.target} profile={env.profile} "
            f"jobs={env.num_jobs} features={sorted(env.features)}"
        )
        return env

    def has_feature(self, name: str) -> bool:
        """Check whether a feature is enabled."""
        return name in self.features

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a variable in the captured environment; empty counts as unset."""
        value = self.environ.get(name)
        return value if value else default

    @property
    def is_debug(self) -> bool:
        return self.profile == "debug"

    def child_environ(self, overrides=()) -> Dict[str, str]:
        """
        Build the environment for a child process.

        Args:
            overrides: Iterable of (name, value) pairs applied in order

        Returns:
            New dictionary based on the captured environment
        """
        env = dict(self.environ)
        for name, value in overrides:
            env[name] = value
        return env
