"""
Build execution with artifact-existence caching.

``BuildInvoker`` checks for the finished library first and does nothing when
it exists. Otherwise it locates a Python interpreter when the integration
needs one (before any build step is spawned), then runs the integration's
steps in order. Any non-zero exit aborts the build with the step's captured
output attached.
"""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Mapping, Optional, Sequence

from prebuildkit.backends.base import BuildContext, DriverIntegration
from prebuildkit.core.exceptions import BuildError
from prebuildkit.core.process import run_command
from prebuildkit.core.python_env import PythonInterpreter, find_python_interpreter

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Result of a build invocation."""

    artifact: Path
    """Path to the library file"""

    was_cached: bool
    """Whether the artifact already existed (no subprocess launched)"""

    steps: List[str] = field(default_factory=list)
    """Names of the steps that ran"""

    build_time: float = 0.0
    """Time spent in build steps in seconds"""


class BuildInvoker:
    """
    Runs a driver integration unless its artifact is already built.

    Example:
        >>> invoker = BuildInvoker(WafDriver(waf_dir / "waf-light"))
        >>> result = invoker.build(src, out / "build" / "0.4.9", "aubio", env, args, context)
        >>> print(result.artifact)
    """

    def __init__(
        self,
        integration: DriverIntegration,
        find_interpreter: Callable[..., PythonInterpreter] = find_python_interpreter,
    ):
        """
        Initialize invoker.

        Args:
            integration: Driver integration providing the steps
            find_interpreter: Interpreter lookup, called with ``env=``
        """
        self.integration = integration
        self.find_interpreter = find_interpreter

    def build(
        self,
        source_dir: Path,
        output_dir: Path,
        library: str,
        env: Mapping[str, str],
        args: Sequence[str],
        context: BuildContext,
    ) -> BuildResult:
        """
        Build ``library`` from ``source_dir`` into ``output_dir``.

        Args:
            source_dir: Unpacked source tree
            output_dir: Build/install root
            library: Library name without prefix/extension
            env: Complete environment inherited by every step
            args: Driver arguments
            context: Build parameters

        Returns:
            BuildResult

        Raises:
            InterpreterNotFoundError: If a Python 3 interpreter is needed and missing
            BuildStepError: If a step exits non-zero
            BuildError: If the steps succeed but the artifact is missing
        """
        source_dir = Path(source_dir)
        output_dir = Path(output_dir)
        artifact = self.integration.artifact_path(output_dir, library, context)

        if artifact.is_file():
            logger.info(f"{library} already built: {artifact}")
            return BuildResult(artifact=artifact, was_cached=True)

        python: Optional[PythonInterpreter] = None
        if self.integration.requires_python:
            python = self.find_interpreter(env=env)

        output_dir.mkdir(parents=True, exist_ok=True)
        steps = self.integration.steps(source_dir, output_dir, args, context, python)

        logger.info(f"Building {library} with {self.integration.name} in {output_dir}")
        start = time.time()
        completed = []

        for step in steps:
            step_env = dict(env)
            step_env.update(step.env)
            run_command(step.name, step.command, cwd=step.cwd, env=step_env)
            completed.append(step.name)

        elapsed = time.time() - start

        if not artifact.is_file():
            raise BuildError(
                f"{self.integration.name} build of {library} finished but "
                f"{artifact} was not produced"
            )

        logger.info(f"Built {artifact} in {elapsed:.2f}s")
        return BuildResult(
            artifact=artifact, was_cached=False, steps=completed, build_time=elapsed
        )
