"""
CMake integration for secondary dependencies.

Configure, build and install form a single integration invocation:
``cmake -S <src> -B <output>/_cmake`` followed by
``cmake --build <output>/_cmake --target install``. The generator is picked
from the tools on PATH (Ninja, then Unix Makefiles), otherwise CMake's
default is used. When the target differs from the host the cross
compilation variables are passed on the command line.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from prebuildkit.backends.base import BuildContext, BuildStep, DriverIntegration
from prebuildkit.core.python_env import PythonInterpreter
from prebuildkit.cross.targets import TargetTriple

logger = logging.getLogger(__name__)

BUILD_SUBDIR = "_cmake"

CMAKE_SYSTEM_NAMES = {
    "android": "Android",
    "darwin": "Darwin",
    "emscripten": "Emscripten",
    "freebsd": "FreeBSD",
    "ios": "iOS",
    "linux": "Linux",
    "macos": "Darwin",
    "netbsd": "NetBSD",
    "openbsd": "OpenBSD",
    "windows": "Windows",
}


class CMakeGenerator:
    """Base class for CMake generator selection."""

    def __init__(self, name: str, tool: str):
        self.name = name
        self.tool = tool

    def is_available(self, path: Optional[str] = None) -> bool:
        """Check if the generator's build tool is on PATH."""
        return shutil.which(self.tool, path=path) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class NinjaGenerator(CMakeGenerator):
    """Ninja - fast, parallel, cross-platform."""

    def __init__(self):
        super().__init__("Ninja", "ninja")


class MakeGenerator(CMakeGenerator):
    """GNU Make - ubiquitous on Unix."""

    def __init__(self):
        super().__init__("Unix Makefiles", "make")

    def is_available(self, path: Optional[str] = None) -> bool:
        if os.name == "nt":
            return False
        return super().is_available(path)


def detect_generator(env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Pick a CMake generator.

    Args:
        env: Environment whose PATH is searched

    Returns:
        Generator name, or None to let CMake choose
    """
    path = env.get("PATH") if env is not None else None
    for generator in (NinjaGenerator(), MakeGenerator()):
        if generator.is_available(path):
            logger.debug(f"Using CMake generator: {generator.name}")
            return generator.name
    return None


def cross_compile_variables(target: TargetTriple) -> Dict[str, str]:
    """
    CMake variables describing a cross-compilation target.

    Example:
        >>> cross_compile_variables(TargetTriple.parse("aarch64-linux-android"))
        {'CMAKE_SYSTEM_NAME': 'Android', 'CMAKE_SYSTEM_PROCESSOR': 'aarch64'}
    """
    return {
        "CMAKE_SYSTEM_NAME": CMAKE_SYSTEM_NAMES.get(target.os, target.os.capitalize()),
        "CMAKE_SYSTEM_PROCESSOR": target.arch,
    }


class CMakeIntegration(DriverIntegration):
    """Generator-based configure + build + install."""

    name = "cmake"
    requires_python = False
    artifact_subdir = "lib"

    def __init__(self, cmake: str = "cmake", generator: Optional[str] = None):
        """
        Args:
            cmake: CMake executable
            generator: Generator name (default: CMake's own choice)
        """
        self.cmake = cmake
        self.generator = generator

    def build_type(self, context: BuildContext) -> str:
        return "Debug" if context.is_debug else "Release"

    def configure_command(
        self,
        source_dir: Path,
        build_dir: Path,
        output_dir: Path,
        args: Sequence[str],
        context: BuildContext,
        generator: Optional[str],
    ) -> List[str]:
        command = [self.cmake, "-S", str(source_dir), "-B", str(build_dir)]
        if generator:
            command += ["-G", generator]

        variables = {
            "CMAKE_INSTALL_PREFIX": str(output_dir),
            "CMAKE_INSTALL_LIBDIR": "lib",
            "CMAKE_BUILD_TYPE": self.build_type(context),
            "BUILD_SHARED_LIBS": "ON" if context.shared else "OFF",
        }
        if context.is_cross:
            variables.update(cross_compile_variables(context.target))

        command += [f"-D{key}={value}" for key, value in variables.items()]
        command += list(args)
        return command

    def steps(
        self,
        source_dir: Path,
        output_dir: Path,
        args: Sequence[str],
        context: BuildContext,
        python: Optional[PythonInterpreter] = None,
    ) -> List[BuildStep]:
        build_dir = Path(output_dir) / BUILD_SUBDIR
        generator = self.generator

        return [
            BuildStep(
                "configure",
                self.configure_command(
                    source_dir, build_dir, output_dir, args, context, generator
                ),
                source_dir,
            ),
            BuildStep(
                "install",
                [
                    self.cmake,
                    "--build",
                    str(build_dir),
                    "--target",
                    "install",
                    "--config",
                    self.build_type(context),
                    "--parallel",
                    str(context.num_jobs),
                ],
                source_dir,
            ),
        ]
