"""
Source archive resolution.

Turns a package/version pair and a URL template into a concrete archive URL.
Environment overrides (``<PREFIX>_VERSION``, ``<PREFIX>_REPOSITORY``,
``<PREFIX>_URL`` and the older ``<PREFIX>_LOCATION`` prefix form) always win
over the manifest defaults. URLs are not validated; a malformed one fails
when it is fetched.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

PLACEHOLDERS = ("package", "version", "repository")


@dataclass(frozen=True)
class SourceDescriptor:
    """
    Versioned source archive description.

    Attributes:
        package: Package name (e.g. 'aubio')
        version: Version string or branch name (e.g. '0.4.9', 'master')
        url_template: URL containing {package}, {version} and/or {repository}
        repository: Optional repository base URL substituted for {repository}
    """

    package: str
    version: str
    url_template: str
    repository: Optional[str] = None

    def resolve(self) -> str:
        """
        Substitute placeholders into the URL template.

        Example:
            >>> SourceDescriptor("demo", "1.0",
            ...     "https://example.test/{package}/{version}.tar.gz").resolve()
            'https://example.test/demo/1.0.tar.gz'
        """
        values = {
            "package": self.package,
            "version": self.version,
            "repository": (self.repository or "").rstrip("/"),
        }
        url = self.url_template
        for name in PLACEHOLDERS:
            url = url.replace("{" + name + "}", values[name])
        return url


def resolve_source(
    package: str,
    version: str,
    url_template: str,
    environ: Mapping[str, str],
    prefix: Optional[str] = None,
    repository: Optional[str] = None,
) -> SourceDescriptor:
    """
    Build a SourceDescriptor with environment overrides applied.

    Args:
        package: Package name
        version: Default version
        url_template: Default URL template
        environ: Captured build environment
        prefix: Variable prefix (default: package name upper-cased)
        repository: Default repository base URL

    Returns:
        SourceDescriptor reflecting the overrides

    Example:
        >>> src = resolve_source("aubio", "0.4.9", "{repository}/archive/{version}.tar.gz",
        ...                      {"AUBIO_VERSION": "master"},
        ...                      repository="https://github.com/aubio/aubio")
        >>> src.resolve()
        'https://github.com/aubio/aubio/archive/master.tar.gz'
    """
    prefix = prefix or package.upper()

    def override(name: str) -> Optional[str]:
        return environ.get(f"{prefix}_{name}") or None

    version = override("VERSION") or version
    repository = override("REPOSITORY") or repository

    explicit_url = override("URL")
    location = override("LOCATION")
    if explicit_url:
        url_template = explicit_url
    elif location:
        url_template = location + "{version}.tar.gz"

    source = SourceDescriptor(
        package=package,
        version=version,
        url_template=url_template,
        repository=repository,
    )
    logger.debug(f"Resolved {package} {version}: {source.resolve()}")
    return source
