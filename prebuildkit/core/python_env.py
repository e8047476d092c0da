"""
Python interpreter discovery.

The waf build driver is a Python program, so the orchestrator needs a
Python 3 interpreter on the build machine. Candidates are tried on PATH in a
fixed order and accepted only when ``<exe> --version`` reports
``Python 3.x``.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence, Tuple

from prebuildkit.core.exceptions import InterpreterNotFoundError

logger = logging.getLogger(__name__)

VERSION_PREFIX = "Python 3."

if os.name == "nt":
    PYTHON_CANDIDATES: Tuple[str, ...] = ("py", "python", "python3")
else:
    PYTHON_CANDIDATES = ("python3", "python")


@dataclass(frozen=True)
class PythonInterpreter:
    """A verified Python 3 interpreter."""

    path: Path
    version: str  # e.g. "Python 3.11.7"


def get_python_version(python_exe: str, env: Optional[Mapping[str, str]] = None) -> Optional[str]:
    """
    Get the version banner of a Python executable.

    Args:
        python_exe: Executable name or path
        env: Environment for the version check (default: inherit)

    Returns:
        Version string such as "Python 3.11.7", or None if the executable
        cannot be run or reports nothing

    Example:
        >>> get_python_version("/usr/bin/python3")
        'Python 3.11.7'
    """
    try:
        result = subprocess.run(
            [python_exe, "--version"],
            capture_output=True,
            text=True,
            timeout=10,
            env=dict(env) if env is not None else None,
        )
    except (subprocess.TimeoutExpired, OSError) as e:
        logger.debug(f"Cannot run {python_exe}: {e}")
        return None

    if result.returncode != 0:
        return None

    # Python 2 printed its version on stderr
    return (result.stdout.strip() or result.stderr.strip()) or None


def find_python_interpreter(
    candidates: Sequence[str] = PYTHON_CANDIDATES,
    env: Optional[Mapping[str, str]] = None,
) -> PythonInterpreter:
    """
    Locate a Python 3 interpreter.

    Args:
        candidates: Executable names to try, in order
        env: Environment whose PATH is searched and which the version check inherits

    Returns:
        The first candidate reporting a Python 3 version

    Raises:
        InterpreterNotFoundError: If no candidate qualifies
    """
    search_path = env.get("PATH") if env is not None else None

    for name in candidates:
        exe = shutil.which(name, path=search_path)
        if exe is None:
            logger.debug(f"Python candidate not on PATH: {name}")
            continue

        version = get_python_version(exe, env)
        if version and version.startswith(VERSION_PREFIX):
            logger.info(f"Using {version} at {exe}")
            return PythonInterpreter(path=Path(exe), version=version)

        logger.debug(f"Rejecting {exe}: reported {version!r}")

    raise InterpreterNotFoundError(candidates)
