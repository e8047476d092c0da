"""
Cross-compilation tool overrides.

The enclosing build may name per-target tools in two ways:

- ``CARGO_TARGET_<TRIPLE>_<TOOL>`` with the triple upper-cased and dashes
  replaced by underscores (e.g. ``CARGO_TARGET_AARCH64_LINUX_ANDROID_CC``)
- ``<TOOL>_<triple>`` with the triple verbatim (e.g. ``CC_aarch64-linux-android``)

The first form wins. Tools named by neither are left to the driver's own
detection; nothing is checked on disk.
"""

import logging
from typing import List, Mapping, Tuple, Union

from prebuildkit.cross.targets import TargetTriple

logger = logging.getLogger(__name__)

ToolchainEnv = List[Tuple[str, str]]

# (exported variable, cargo suffix, generic prefix)
TOOLS = (
    ("CC", "CC", "CC"),
    ("AR", "AR", "AR"),
    ("LINKER", "LINKER", "LD"),
)


def cargo_target_key(triple: str) -> str:
    """
    Convert a triple into its upper-case variable form.

    Example:
        >>> cargo_target_key("aarch64-linux-android")
        'AARCH64_LINUX_ANDROID'
    """
    return triple.upper().replace("-", "_").replace(".", "_")


def resolve_toolchain_env(
    target: Union[str, TargetTriple], environ: Mapping[str, str]
) -> ToolchainEnv:
    """
    Collect compiler, archiver and linker overrides for a target.

    Args:
        target: Target triple
        environ: Captured build environment

    Returns:
        Ordered (variable, value) overrides; empty when nothing is set

    Example:
        >>> resolve_toolchain_env("aarch64-linux-android",
        ...     {"CC_aarch64-linux-android": "clang"})
        [('CC', 'clang')]
    """
    triple = str(target)
    key = cargo_target_key(triple)
    overrides: ToolchainEnv = []

    for variable, cargo_suffix, generic_prefix in TOOLS:
        for name in (f"CARGO_TARGET_{key}_{cargo_suffix}", f"{generic_prefix}_{triple}"):
            value = environ.get(name)
            if value:
                logger.debug(f"{variable} for {triple} from {name}: {value}")
                overrides.append((variable, value))
                break

    return overrides
