"""
Secondary dependency pipeline.

Builds the optional numeric transform library (FFTW3 by default) before the
primary library so that its package-config directory can be handed to the
primary build through ``PKG_CONFIG_PATH``. The pipeline is enabled by a
feature; ``<PREFIX>_DIR`` names an existing installation prefix and skips
the fetch and build entirely.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional

from prebuildkit.backends.autotools import AutotoolsIntegration
from prebuildkit.backends.base import BuildContext, DriverIntegration
from prebuildkit.backends.cmake import CMakeIntegration, detect_generator
from prebuildkit.backends.invoker import BuildInvoker, BuildResult
from prebuildkit.config.manifest import SecondaryConfig
from prebuildkit.core.environment import BuildEnvironment
from prebuildkit.core.python_env import PythonInterpreter, find_python_interpreter
from prebuildkit.cross.toolchain import resolve_toolchain_env
from prebuildkit.source.fetcher import Fetcher
from prebuildkit.source.resolver import SourceDescriptor, resolve_source

logger = logging.getLogger(__name__)


@dataclass
class SecondaryResult:
    """Installed secondary dependency."""

    package: str
    library: str
    prefix: Path
    shared: bool
    link: bool
    build: Optional[BuildResult] = None

    @property
    def lib_dir(self) -> Path:
        return self.prefix / "lib"

    @property
    def pkg_config_dir(self) -> Path:
        return self.prefix / "lib" / "pkgconfig"


class SecondaryDependencyPipeline:
    """
    Fetch + build for the secondary dependency.

    Example:
        >>> pipeline = SecondaryDependencyPipeline(manifest.secondary, build_env, context)
        >>> result = pipeline.run()
        >>> if result:
        ...     print(result.pkg_config_dir)
    """

    def __init__(
        self,
        config: SecondaryConfig,
        build_env: BuildEnvironment,
        context: BuildContext,
        fetcher: Optional[Fetcher] = None,
        integration: Optional[DriverIntegration] = None,
        find_interpreter: Callable[..., PythonInterpreter] = find_python_interpreter,
    ):
        self.config = config
        self.build_env = build_env
        self.fetcher = fetcher or Fetcher()
        self.integration = integration or self._create_integration()
        self.find_interpreter = find_interpreter
        self.context = BuildContext(
            target=context.target,
            host=context.host,
            profile=context.profile,
            num_jobs=context.num_jobs,
            shared=self.shared,
        )

    @property
    def enabled(self) -> bool:
        return self.build_env.has_feature(self.config.feature)

    @property
    def double_precision(self) -> bool:
        return bool(self.config.double_feature) and self.build_env.has_feature(
            self.config.double_feature
        )

    @property
    def shared(self) -> bool:
        return bool(self.config.shared_feature) and self.build_env.has_feature(
            self.config.shared_feature
        )

    @property
    def link(self) -> bool:
        return not (
            self.config.nolink_feature
            and self.build_env.has_feature(self.config.nolink_feature)
        )

    @property
    def library(self) -> str:
        if self.double_precision and self.config.double_library:
            return self.config.double_library
        return self.config.library

    def source(self) -> SourceDescriptor:
        return resolve_source(
            self.config.package,
            self.config.version,
            self.config.url,
            self.build_env.environ,
            prefix=self.config.prefix,
        )

    def source_dir(self, version: str) -> Path:
        return self.build_env.out_dir / f"{self.config.package}-source" / version

    def build_dir(self, version: str) -> Path:
        return self.build_env.out_dir / f"{self.config.package}-build" / version

    def build_args(self) -> List[str]:
        """Integration-specific arguments selecting precision and linkage."""
        single = not self.double_precision

        if isinstance(self.integration, AutotoolsIntegration):
            args = []
            if single:
                args.append("--enable-single")
            args.append("--enable-shared" if self.shared else "--enable-static")
            return args

        args = ["-DBUILD_TESTS=OFF", "-DCMAKE_POSITION_INDEPENDENT_CODE=ON"]
        if single:
            args.append("-DENABLE_FLOAT=ON")
        return args

    def run(self) -> Optional[SecondaryResult]:
        """
        Make the secondary dependency available.

        Returns:
            SecondaryResult, or None when the dependency is disabled

        Raises:
            FetchError: If the sources cannot be fetched
            BuildStepError: If a build step fails
        """
        if not self.enabled:
            logger.debug(f"{self.config.package} disabled")
            return None

        discovered = self.build_env.get(f"{self.config.prefix}_DIR")
        if discovered:
            logger.info(f"Using installed {self.config.package} at {discovered}")
            return SecondaryResult(
                package=self.config.package,
                library=self.library,
                prefix=Path(discovered),
                shared=self.shared,
                link=self.link,
            )

        source = self.source()
        source_dir = self.source_dir(source.version)
        build_dir = self.build_dir(source.version)

        self.fetcher.fetch(source, source_dir)

        env = self.build_env.child_environ(
            resolve_toolchain_env(self.context.target, self.build_env.environ)
        )
        build = BuildInvoker(self.integration, self.find_interpreter).build(
            source_dir, build_dir, self.library, env, self.build_args(), self.context
        )

        return SecondaryResult(
            package=self.config.package,
            library=self.library,
            prefix=build_dir,
            shared=self.shared,
            link=self.link,
            build=build,
        )

    def _create_integration(self) -> DriverIntegration:
        if self.config.build_system == "autotools":
            return AutotoolsIntegration()
        return CMakeIntegration(generator=detect_generator(self.build_env.environ))
