"""
Legacy make-based driver integration.

Older aubio trees wrap waf in a top-level Makefile. The whole build is a
single ``make -j<N>`` with the driver arguments passed through the
``WAFOPTS`` variable; the library is left in the waf output's ``src``
directory rather than installed.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from prebuildkit.backends.base import BuildContext, BuildStep, DriverIntegration
from prebuildkit.core.python_env import PythonInterpreter


class MakeDriver(DriverIntegration):
    """Single-step make integration."""

    name = "make"
    requires_python = False
    artifact_subdir = "src"

    def __init__(self, make: str = "make"):
        self.make = make

    def wafopts(self, args: Sequence[str], context: BuildContext) -> str:
        opts = []
        if context.is_debug:
            opts.append("--debug")
        opts.extend(args)
        return " ".join(opts)

    def steps(
        self,
        source_dir: Path,
        output_dir: Path,
        args: Sequence[str],
        context: BuildContext,
        python: Optional[PythonInterpreter] = None,
    ) -> List[BuildStep]:
        return [
            BuildStep(
                "build",
                [self.make, f"-j{context.num_jobs}"],
                source_dir,
                env=[("WAFOPTS", self.wafopts(args, context))],
            )
        ]
