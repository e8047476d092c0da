"""
prebuildkit command-line entry point.

The command takes no arguments. Everything it needs comes from the
environment set up by the enclosing build; link directives go to stdout and
log output goes to stderr.
"""

import logging
import os
import sys
from typing import Mapping, Optional, TextIO

from prebuildkit.config.manifest import load_manifest
from prebuildkit.core.environment import BuildEnvironment
from prebuildkit.core.exceptions import BuildStepError, PrebuildKitError
from prebuildkit.link.emitter import LinkEmitter
from prebuildkit.pipeline.orchestrator import Orchestrator

logger = logging.getLogger(__name__)

LOG_LEVEL_VARIABLE = "PREBUILDKIT_LOG_LEVEL"
MANIFEST_VARIABLE = "PREBUILDKIT_MANIFEST"


def configure_logging(environ: Mapping[str, str]) -> None:
    """
    Configure logging from ``PREBUILDKIT_LOG_LEVEL``.

    Args:
        environ: Environment to read the level from
    """
    name = (environ.get(LOG_LEVEL_VARIABLE) or "INFO").upper()
    level = getattr(logging, name, None)
    if not isinstance(level, int):
        level = logging.INFO

    if level <= logging.DEBUG:
        format_str = "%(levelname)s [%(name)s] %(message)s"
    else:
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,
    )


def run(
    environ: Optional[Mapping[str, str]] = None, stream: Optional[TextIO] = None
) -> int:
    """
    Run one orchestration.

    Args:
        environ: Environment (default: os.environ)
        stream: Destination for link directives (default: stdout)

    Returns:
        Exit code: 0 on success, 1 on any failure
    """
    if environ is None:
        environ = os.environ
    configure_logging(environ)

    try:
        build_env = BuildEnvironment.from_environ(environ)
        manifest = load_manifest(build_env.get(MANIFEST_VARIABLE))
        emitter = LinkEmitter(stream=stream, frameworks=manifest.frameworks)
        result = Orchestrator(manifest, build_env, emitter=emitter).run()
    except BuildStepError as e:
        logger.error(f"Error: {e}\n{e.diagnostic()}")
        return 1
    except PrebuildKitError as e:
        logger.error(f"Error: {e}")
        return 1

    logger.info(f"{manifest.package} {result.source.version} ready in {result.lib_dir}")
    return 0


def main():
    sys.exit(run())
