"""
waf build driver integration.

The driver is launched with a Python 3 interpreter in three separate steps:
``configure`` (feature flags, directories, target platform and build type),
``build`` (with the job count) and ``install`` into the prefix, which puts
the library under ``<output>/lib``.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

from prebuildkit.backends.base import BuildContext, BuildStep, DriverIntegration
from prebuildkit.core.exceptions import InterpreterNotFoundError
from prebuildkit.core.python_env import PythonInterpreter
from prebuildkit.cross.targets import map_platform

logger = logging.getLogger(__name__)


class WafDriver(DriverIntegration):
    """Multi-step waf integration."""

    name = "waf"
    requires_python = True
    artifact_subdir = "lib"

    def __init__(self, driver_script: Path):
        """
        Args:
            driver_script: Path to the waf entry script (e.g. ``waf-light``)
        """
        self.driver_script = Path(driver_script)

    def configure_args(self, args: Sequence[str], context: BuildContext) -> List[str]:
        """Arguments of the configure step."""
        return [
            *args,
            f"--with-target-platform={map_platform(context.target)}",
            f"--build-type={'debug' if context.is_debug else 'release'}",
        ]

    def steps(
        self,
        source_dir: Path,
        output_dir: Path,
        args: Sequence[str],
        context: BuildContext,
        python: Optional[PythonInterpreter] = None,
    ) -> List[BuildStep]:
        if python is None:
            raise InterpreterNotFoundError([])

        launcher = [str(python.path), str(self.driver_script)]
        logger.debug(f"Launching waf with {python.version} ({python.path})")

        return [
            BuildStep(
                "configure",
                [*launcher, "configure", *self.configure_args(args, context)],
                source_dir,
            ),
            BuildStep("build", [*launcher, "build", f"-j{context.num_jobs}"], source_dir),
            BuildStep("install", [*launcher, "install"], source_dir),
        ]
