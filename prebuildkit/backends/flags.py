"""
Feature flag synthesis for the upstream build driver.

The manifest's feature-toggle table is evaluated against the enabled
features into ``FeatureFlags``, an ordered tuple of (name, state) pairs.
``FlagSynthesizer`` turns that into ``--enable-<name>``/``--disable-<name>``
arguments plus output/prefix arguments, and folds secondary package-config
directories into ``PKG_CONFIG_PATH``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import AbstractSet, Iterable, List, Optional, Sequence, Tuple

FeatureFlags = Tuple[Tuple[str, bool], ...]

ENABLE_PREFIX = "--enable-"
DISABLE_PREFIX = "--disable-"

PKG_CONFIG_PATH = "PKG_CONFIG_PATH"
PKG_CONFIG_SEPARATOR = ":"


@dataclass(frozen=True)
class BuildConfig:
    """
    Per-build configuration fed from the secondary pipeline.

    Attributes:
        pkg_config_dirs: Package-config directories of dependencies built
            or discovered for this build (empty when none are enabled)
    """

    pkg_config_dirs: Tuple[Path, ...] = ()


@dataclass
class SynthesizedFlags:
    """Driver arguments and extra environment for one build."""

    args: List[str] = field(default_factory=list)
    env: List[Tuple[str, str]] = field(default_factory=list)


def feature_table(rules, features: AbstractSet[str]) -> FeatureFlags:
    """
    Evaluate the feature-toggle table.

    Args:
        rules: Sequence of FeatureRule from the manifest
        features: Enabled feature names

    Returns:
        FeatureFlags in table order

    Example:
        >>> from prebuildkit.config import FeatureRule
        >>> feature_table([FeatureRule("docs", enabled=False),
        ...                FeatureRule("fftw3f", when=["with-fftw3"], unless=["with-double"])],
        ...               {"with-fftw3"})
        (('docs', False), ('fftw3f', True))
    """
    flags = []
    for rule in rules:
        if rule.enabled is not None:
            state = rule.enabled
        else:
            state = all(name in features for name in rule.when) and not any(
                name in features for name in rule.unless
            )
        flags.append((rule.flag, state))
    return tuple(flags)


def pkg_config_path(dirs: Iterable[Path]) -> Optional[str]:
    """Join package-config directories, or None when there are none."""
    entries = [str(d) for d in dirs]
    if not entries:
        return None
    return PKG_CONFIG_SEPARATOR.join(entries)


class FlagSynthesizer:
    """
    Converts feature flags into the driver's argument vocabulary.

    Example:
        >>> flags = FlagSynthesizer().synthesize((("docs", False), ("jack", True)),
        ...                                      BuildConfig(), out_dir=Path("/o"))
        >>> flags.args
        ['--disable-docs', '--enable-jack', '--out=/o']
    """

    def synthesize(
        self,
        feature_flags: FeatureFlags,
        build_config: BuildConfig,
        out_dir: Optional[Path] = None,
        prefix: Optional[Path] = None,
    ) -> SynthesizedFlags:
        """
        Produce driver arguments and environment.

        Args:
            feature_flags: Ordered (name, state) pairs
            build_config: Secondary discovery paths
            out_dir: Driver build output directory (``--out``)
            prefix: Installation prefix (``--prefix``)

        Returns:
            SynthesizedFlags with one enable/disable argument per flag

        Raises:
            ValueError: If a flag name appears twice
        """
        result = SynthesizedFlags()
        seen = set()

        for name, state in feature_flags:
            if name in seen:
                raise ValueError(f"Duplicate feature flag: {name}")
            seen.add(name)
            result.args.append((ENABLE_PREFIX if state else DISABLE_PREFIX) + name)

        if out_dir is not None:
            result.args.append(f"--out={out_dir}")
        if prefix is not None:
            result.args.append(f"--prefix={prefix}")

        search_path = pkg_config_path(build_config.pkg_config_dirs)
        if search_path:
            result.env.append((PKG_CONFIG_PATH, search_path))

        return result


def parse_feature_args(args: Sequence[str]) -> FeatureFlags:
    """
    Recover feature flags from a driver argument list.

    Arguments other than ``--enable-*``/``--disable-*`` are ignored.

    Example:
        >>> parse_feature_args(["--disable-docs", "--enable-jack", "--out=/o"])
        (('docs', False), ('jack', True))
    """
    flags = []
    for arg in args:
        if arg.startswith(ENABLE_PREFIX):
            flags.append((arg[len(ENABLE_PREFIX) :], True))
        elif arg.startswith(DISABLE_PREFIX):
            flags.append((arg[len(DISABLE_PREFIX) :], False))
    return tuple(flags)
