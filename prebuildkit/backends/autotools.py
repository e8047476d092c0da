"""
Autotools integration for secondary dependencies.

``./configure --prefix=<output> --with-pic <args>`` followed by
``make -j<N> install``. Optimisation flags follow the build profile through
``CFLAGS``; cross builds pass ``--host=<target>``.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from prebuildkit.backends.base import BuildContext, BuildStep, DriverIntegration
from prebuildkit.core.python_env import PythonInterpreter

DEBUG_CFLAGS = "-O0 -g3"
RELEASE_CFLAGS = "-O3"


class AutotoolsIntegration(DriverIntegration):
    """configure + make install."""

    name = "autotools"
    requires_python = False
    artifact_subdir = "lib"

    def __init__(self, make: str = "make"):
        self.make = make

    def steps(
        self,
        source_dir: Path,
        output_dir: Path,
        args: Sequence[str],
        context: BuildContext,
        python: Optional[PythonInterpreter] = None,
    ) -> List[BuildStep]:
        env = [("CFLAGS", DEBUG_CFLAGS if context.is_debug else RELEASE_CFLAGS)]

        configure = [
            str(Path(source_dir) / "configure"),
            f"--prefix={output_dir}",
            "--with-pic",
        ]
        if context.is_cross:
            configure.append(f"--host={context.target}")
        configure += list(args)

        return [
            BuildStep("configure", configure, source_dir, env=env),
            BuildStep(
                "install", [self.make, f"-j{context.num_jobs}", "install"], source_dir, env=env
            ),
        ]
