"""
Portability patches for fetched sources.

Some upstream helper scripts start with ``#! /bin/bash``, which does not
exist on every build host; they are rewritten to ``#!/usr/bin/env bash``.
The driver's top-level script may also load optional tooling that breaks the
build (aubio's ``waf_gensyms``); such lines are removed.

Patching is in place and idempotent: a second run finds nothing to change.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from prebuildkit.core.exceptions import PatchError
from prebuildkit.core.filesystem import atomic_write

logger = logging.getLogger(__name__)

BROKEN_SHEBANG = "#! /bin/bash"
PORTABLE_SHEBANG = "#!/usr/bin/env bash"


@dataclass
class PatchReport:
    """Files modified by a patch run."""

    patched: List[Path] = field(default_factory=list)
    unchanged: List[Path] = field(default_factory=list)


class SourcePatcher:
    """
    Rewrites known-broken portability markers in a source tree.

    Example:
        >>> patcher = SourcePatcher(["scripts/get_waf.sh"], "wscript",
        ...                         ["ctx.load('waf_gensyms', tooldir='.')"])
        >>> report = patcher.patch(Path("out/source/0.4.9"))
    """

    def __init__(
        self,
        scripts: Sequence[str] = (),
        driver_script: Optional[str] = None,
        drop_lines: Sequence[str] = (),
    ):
        """
        Initialize patcher.

        Args:
            scripts: Script paths (relative to the source root) to fix shebangs in
            driver_script: Driver's top-level script to drop directives from
            drop_lines: Exact (stripped) lines to remove from the driver script
        """
        self.scripts = list(scripts)
        self.driver_script = driver_script
        self.drop_lines = [line.strip() for line in drop_lines]

    @classmethod
    def from_manifest(cls, patch_config) -> "SourcePatcher":
        return cls(
            scripts=patch_config.scripts,
            driver_script=patch_config.driver_script,
            drop_lines=patch_config.drop_lines,
        )

    def patch(self, source_dir: Path) -> PatchReport:
        """
        Apply all patches to ``source_dir``.

        Raises:
            PatchError: If a target file is missing or unreadable
        """
        source_dir = Path(source_dir)
        report = PatchReport()

        for script in self.scripts:
            path = source_dir / script
            changed = self._rewrite(path, fix_shebang)
            (report.patched if changed else report.unchanged).append(path)

        if self.driver_script and self.drop_lines:
            path = source_dir / self.driver_script
            changed = self._rewrite(path, lambda text: drop_lines(text, self.drop_lines))
            (report.patched if changed else report.unchanged).append(path)

        if report.patched:
            logger.info(f"Patched {len(report.patched)} file(s) in {source_dir}")
        return report

    def _rewrite(self, path: Path, transform) -> bool:
        # line endings are kept as found (CRLF checkouts stay CRLF)
        try:
            with open(path, encoding="utf-8", newline="") as f:
                original = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PatchError(f"Cannot read {path}: {e}") from e

        patched = transform(original)
        if patched == original:
            return False

        try:
            atomic_write(path, patched)
        except OSError as e:
            raise PatchError(f"Cannot write {path}: {e}") from e

        logger.debug(f"Patched {path}")
        return True


def fix_shebang(text: str) -> str:
    """Replace the broken bash shebang when a script starts with it."""
    if text.startswith(BROKEN_SHEBANG):
        return PORTABLE_SHEBANG + text[len(BROKEN_SHEBANG) :]
    return text


def drop_lines(text: str, lines: Sequence[str]) -> str:
    """Remove every line whose stripped content is one of ``lines``."""
    kept = [
        line
        for line in text.splitlines(keepends=True)
        if line.strip() not in lines
    ]
    return "".join(kept)
