"""YAML dependency manifest for prebuildkit.

A manifest declares everything static about the native dependency: where its
sources live, which library file it produces, how its build driver is
obtained and invoked, which portability patches it needs, its feature-toggle
table and the optional secondary dependency. The default manifest for aubio
ships with the package in ``prebuildkit/data/aubio.yaml``.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from prebuildkit.core.exceptions import ManifestError

DEFAULT_MANIFEST = Path(__file__).parent.parent / "data" / "aubio.yaml"

DRIVER_KINDS = ["waf", "make"]
SECONDARY_BUILD_SYSTEMS = ["cmake", "autotools"]


@dataclass
class DriverConfig:
    """Upstream build driver configuration."""

    kind: str = "waf"  # 'waf' (current) or 'make' (legacy)
    version: Optional[str] = None
    url: Optional[str] = None  # template with {version}
    script: str = "waf-light"  # driver entry point inside the fetched driver tree
    env_prefix: str = "WAF"


@dataclass
class PatchConfig:
    """Portability patches applied to fetched sources."""

    scripts: List[str] = field(default_factory=list)
    driver_script: Optional[str] = None
    drop_lines: List[str] = field(default_factory=list)


@dataclass
class FeatureRule:
    """
    One row of the feature-toggle table.

    The flag is on when ``enabled`` is given and true, or otherwise when all
    ``when`` features are enabled and none of the ``unless`` features are.
    """

    flag: str
    enabled: Optional[bool] = None
    when: List[str] = field(default_factory=list)
    unless: List[str] = field(default_factory=list)


@dataclass
class SecondaryConfig:
    """Optional secondary dependency built before the primary one."""

    package: str
    version: str
    url: str
    feature: str
    library: str
    double_library: Optional[str] = None
    double_feature: Optional[str] = None
    shared_feature: Optional[str] = None
    nolink_feature: Optional[str] = None
    build_system: str = "cmake"
    env_prefix: Optional[str] = None

    @property
    def prefix(self) -> str:
        return self.env_prefix or self.package.upper()


@dataclass
class DependencyManifest:
    """Complete dependency description."""

    package: str
    version: str
    url: str
    library: str
    repository: Optional[str] = None
    env_prefix: Optional[str] = None
    shared_feature: str = "shared"
    frameworks: List[str] = field(default_factory=list)
    driver: DriverConfig = field(default_factory=DriverConfig)
    patch: PatchConfig = field(default_factory=PatchConfig)
    features: List[FeatureRule] = field(default_factory=list)
    secondary: Optional[SecondaryConfig] = None

    @property
    def prefix(self) -> str:
        return self.env_prefix or self.package.upper()


def load_manifest(manifest_path: Optional[Path] = None) -> DependencyManifest:
    """
    Load a dependency manifest.

    Args:
        manifest_path: Path to a manifest file (default: bundled aubio manifest)

    Returns:
        Parsed and validated manifest

    Raises:
        ManifestError: If the file is missing or invalid
    """
    manifest_path = Path(manifest_path) if manifest_path else DEFAULT_MANIFEST

    if not manifest_path.exists():
        raise ManifestError(f"Manifest file not found: {manifest_path}")

    try:
        with open(manifest_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ManifestError(f"Invalid YAML syntax in {manifest_path}: {e}")

    if data is None:
        raise ManifestError(f"Manifest file is empty: {manifest_path}")

    return parse_manifest(data)


def parse_manifest(data: dict) -> DependencyManifest:
    """Parse and validate manifest data."""
    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a mapping")

    for field_name in ("package", "version", "url", "library"):
        if not data.get(field_name):
            raise ManifestError(f"Missing required field: {field_name}")

    return DependencyManifest(
        package=str(data["package"]),
        version=str(data["version"]),
        url=str(data["url"]),
        library=str(data["library"]),
        repository=data.get("repository"),
        env_prefix=data.get("env_prefix"),
        shared_feature=data.get("shared_feature", "shared"),
        frameworks=_string_list(data.get("frameworks", []), "frameworks"),
        driver=_parse_driver(_mapping(data.get("driver"), "driver")),
        patch=_parse_patch(_mapping(data.get("patch"), "patch")),
        features=_parse_features(data.get("features")),
        secondary=_parse_secondary(
            _mapping(data["secondary"], "secondary")
            if data.get("secondary") is not None
            else None
        ),
    )


def _mapping(value, name: str) -> dict:
    """An optional manifest section; an empty (null) section counts as {}."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ManifestError(f"{name} must be a mapping")
    return value


def _string_list(value, name: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ManifestError(f"{name} must be a list")
    return [str(item) for item in value]


def _parse_driver(data: dict) -> DriverConfig:
    """Parse driver configuration."""
    kind = data.get("kind", "waf")
    if kind not in DRIVER_KINDS:
        raise ManifestError(
            f"Invalid driver kind: {kind} (expected one of {DRIVER_KINDS})"
        )

    if kind == "waf" and not (data.get("version") and data.get("url")):
        raise ManifestError("The waf driver requires 'version' and 'url'")

    return DriverConfig(
        kind=kind,
        version=str(data["version"]) if data.get("version") else None,
        url=data.get("url"),
        script=data.get("script", "waf-light"),
        env_prefix=data.get("env_prefix", "WAF"),
    )


def _parse_patch(data: dict) -> PatchConfig:
    """Parse patch configuration."""
    return PatchConfig(
        scripts=_string_list(data.get("scripts", []), "patch.scripts"),
        driver_script=data.get("driver_script"),
        drop_lines=_string_list(data.get("drop_lines", []), "patch.drop_lines"),
    )


def _parse_features(data: Optional[list]) -> List[FeatureRule]:
    """Parse the feature-toggle table."""
    if data is None:
        return []
    if not isinstance(data, list):
        raise ManifestError("features must be a list")

    rules = []
    seen = set()

    for rule_data in data:
        if not isinstance(rule_data, dict) or "flag" not in rule_data:
            raise ManifestError("Each feature rule must specify 'flag'")

        flag = str(rule_data["flag"])
        if flag in seen:
            raise ManifestError(f"Duplicate feature flag: {flag}")
        seen.add(flag)

        enabled = rule_data.get("enabled")
        if enabled is not None and not isinstance(enabled, bool):
            raise ManifestError(f"features.{flag}.enabled must be a boolean")

        rules.append(
            FeatureRule(
                flag=flag,
                enabled=enabled,
                when=_string_list(rule_data.get("when", []), f"features.{flag}.when"),
                unless=_string_list(
                    rule_data.get("unless", []), f"features.{flag}.unless"
                ),
            )
        )

    return rules


def _parse_secondary(data: Optional[dict]) -> Optional[SecondaryConfig]:
    """Parse secondary dependency configuration."""
    if data is None:
        return None

    for field_name in ("package", "version", "url", "feature", "library"):
        if not data.get(field_name):
            raise ManifestError(f"Secondary dependency missing required field: {field_name}")

    build_system = data.get("build_system", "cmake")
    if build_system not in SECONDARY_BUILD_SYSTEMS:
        raise ManifestError(
            f"Invalid secondary build system: {build_system} "
            f"(expected one of {SECONDARY_BUILD_SYSTEMS})"
        )

    return SecondaryConfig(
        package=str(data["package"]),
        version=str(data["version"]),
        url=str(data["url"]),
        feature=str(data["feature"]),
        library=str(data["library"]),
        double_library=data.get("double_library"),
        double_feature=data.get("double_feature"),
        shared_feature=data.get("shared_feature"),
        nolink_feature=data.get("nolink_feature"),
        build_system=build_system,
        env_prefix=data.get("env_prefix"),
    )
