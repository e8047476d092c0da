"""
Driver integration interface for prebuildkit.

A driver integration knows how one upstream build system is invoked: which
steps run, with which command lines, and where the finished library lands.
``BuildInvoker`` executes the steps; integrations never spawn processes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from prebuildkit.core.python_env import PythonInterpreter
from prebuildkit.cross.targets import TargetTriple


@dataclass
class BuildContext:
    """Build parameters shared by all steps of one build."""

    target: TargetTriple
    host: TargetTriple
    profile: str = "release"
    num_jobs: int = 1
    shared: bool = False

    @property
    def is_debug(self) -> bool:
        return self.profile == "debug"

    @property
    def is_cross(self) -> bool:
        return self.target.raw != self.host.raw


@dataclass
class BuildStep:
    """One subprocess invocation of a build."""

    name: str
    command: List[str]
    cwd: Path
    env: List[Tuple[str, str]] = field(default_factory=list)


def lib_file(name: str, shared: bool, target: TargetTriple) -> str:
    """
    File name of a library for a target.

    Example:
        >>> lib_file("aubio", False, TargetTriple.parse("x86_64-unknown-linux-gnu"))
        'libaubio.a'
        >>> lib_file("aubio", True, TargetTriple.parse("x86_64-pc-windows-msvc"))
        'aubio.dll'
        >>> lib_file("aubio", False, TargetTriple.parse("x86_64-pc-windows-gnu"))
        'libaubio.a'
    """
    if target.is_windows and target.env.startswith("gnu"):
        # mingw: gcc archive naming, DLL without prefix
        return f"{name}.dll" if shared else f"lib{name}.a"
    if target.is_windows:
        return f"{name}.{'dll' if shared else 'lib'}"
    if target.is_apple:
        return f"lib{name}.{'dylib' if shared else 'a'}"
    return f"lib{name}.{'so' if shared else 'a'}"


class DriverIntegration(ABC):
    """
    Abstract base class for build driver integrations.

    Attributes:
        name: Human-readable integration name
        requires_python: Whether the steps need a Python 3 interpreter
        artifact_subdir: Directory under the output root holding the library
    """

    name: str = "driver"
    requires_python: bool = False
    artifact_subdir: str = "lib"

    def artifact_dir(self, output_dir: Path) -> Path:
        return Path(output_dir) / self.artifact_subdir

    def artifact_path(self, output_dir: Path, library: str, context: BuildContext) -> Path:
        """Deterministic location of the finished library."""
        return self.artifact_dir(output_dir) / lib_file(
            library, context.shared, context.target
        )

    @abstractmethod
    def steps(
        self,
        source_dir: Path,
        output_dir: Path,
        args: Sequence[str],
        context: BuildContext,
        python: Optional[PythonInterpreter] = None,
    ) -> List[BuildStep]:
        """
        Build the ordered list of steps.

        Args:
            source_dir: Unpacked source tree
            output_dir: Build/install root
            args: Driver arguments (feature flags, directories)
            context: Build parameters
            python: Interpreter, when ``requires_python`` is set

        Returns:
            Steps to run in order
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
