"""
Link directive emission.

Directives are written one per line to the orchestration's standard output,
where the enclosing build reads them:

    search-path=<dir>
    link-lib=<name>            shared library
    link-lib-static=<name>     static library
    link-lib-framework=<name>  Apple system framework
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from prebuildkit.cross.targets import TargetTriple

logger = logging.getLogger(__name__)

APPLE_FRAMEWORKS = ("Accelerate", "CoreFoundation")


class LinkEmitter:
    """Announces search paths and libraries to the enclosing build."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        frameworks: Sequence[str] = APPLE_FRAMEWORKS,
    ):
        """
        Args:
            stream: Output stream (default: sys.stdout at emit time)
            frameworks: System frameworks required on Apple targets
        """
        self.stream = stream
        self.frameworks = tuple(frameworks)

    def directive(self, key: str, value) -> None:
        stream = self.stream or sys.stdout
        stream.write(f"{key}={value}\n")
        stream.flush()

    def emit(
        self,
        library: str,
        lib_dir: Path,
        shared: bool,
        target: TargetTriple,
        frameworks: bool = True,
    ) -> None:
        """
        Emit the directives for one library.

        Args:
            library: Library link name
            lib_dir: Directory holding the library
            shared: Link as shared rather than static
            target: Target triple
            frameworks: Whether to add the Apple frameworks for this library
        """
        logger.debug(f"Emitting link directives for {library} ({lib_dir})")

        self.directive("search-path", lib_dir)
        self.directive("link-lib" if shared else "link-lib-static", library)

        if frameworks and target.is_apple:
            for framework in self.frameworks:
                self.directive("link-lib-framework", framework)
