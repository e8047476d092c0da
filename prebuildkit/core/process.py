"""
Subprocess execution for build steps.

Each step runs synchronously with its output captured. There is no timeout:
a hung child hangs the build.
"""

import logging
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from prebuildkit.core.exceptions import BuildStepError

logger = logging.getLogger(__name__)


def run_command(
    step: str,
    command: Sequence[str],
    cwd: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> subprocess.CompletedProcess:
    """
    Run one build step and require a zero exit status.

    Args:
        step: Step name used in diagnostics (e.g. 'configure')
        command: Command line
        cwd: Working directory
        env: Complete environment for the child

    Returns:
        The completed process

    Raises:
        BuildStepError: If the command cannot be started or exits non-zero
    """
    command = [str(arg) for arg in command]
    logger.info(f"Running {step}: {' '.join(command)}")

    try:
        result = subprocess.run(
            command,
            cwd=str(cwd) if cwd else None,
            env=dict(env) if env is not None else None,
            capture_output=True,
            text=True,
            errors="replace",
        )
    except OSError as e:
        logger.error(f"Failed to start {command[0]}: {e}")
        raise BuildStepError(step, command, None, stderr=str(e)) from e

    if result.stdout:
        logger.debug(result.stdout.rstrip())

    if result.returncode != 0:
        logger.error(f"Step '{step}' failed with exit code {result.returncode}")
        raise BuildStepError(
            step, command, result.returncode, result.stdout or "", result.stderr or ""
        )

    return result
