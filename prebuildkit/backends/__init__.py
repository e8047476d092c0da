"""
Build backends for prebuildkit: flag synthesis, driver integrations and
the build invoker.
"""

from .base import BuildContext, BuildStep, DriverIntegration, lib_file
from .flags import (
    BuildConfig,
    FeatureFlags,
    FlagSynthesizer,
    SynthesizedFlags,
    feature_table,
    parse_feature_args,
    pkg_config_path,
)
from .waf import WafDriver
from .make import MakeDriver
from .cmake import CMakeIntegration, detect_generator
from .autotools import AutotoolsIntegration
from .invoker import BuildInvoker, BuildResult

__all__ = [
    "BuildContext",
    "BuildStep",
    "DriverIntegration",
    "lib_file",
    "BuildConfig",
    "FeatureFlags",
    "FlagSynthesizer",
    "SynthesizedFlags",
    "feature_table",
    "parse_feature_args",
    "pkg_config_path",
    "WafDriver",
    "MakeDriver",
    "CMakeIntegration",
    "detect_generator",
    "AutotoolsIntegration",
    "BuildInvoker",
    "BuildResult",
]
