"""
Primary build orchestration.

Runs the whole sequence for the manifest's library:

1. Secondary dependency (when enabled), producing a package-config path
2. Resolve and fetch the primary sources into ``<out>/source/<version>``
3. Apply portability patches
4. Fetch the waf driver into ``<out>/waf/<version>`` (waf integration only)
5. Synthesize driver arguments and environment (tool overrides,
   ``PKG_CONFIG_PATH``)
6. Build into ``<out>/build/<version>`` unless the library already exists
7. Emit link directives

Every step blocks; any failure propagates as a ``PrebuildKitError``.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from prebuildkit.backends.base import BuildContext, DriverIntegration
from prebuildkit.backends.flags import BuildConfig, FlagSynthesizer, feature_table
from prebuildkit.backends.invoker import BuildInvoker, BuildResult
from prebuildkit.backends.make import MakeDriver
from prebuildkit.backends.waf import WafDriver
from prebuildkit.config.manifest import DependencyManifest
from prebuildkit.core.environment import BuildEnvironment
from prebuildkit.core.exceptions import InvalidEnvironmentError
from prebuildkit.core.python_env import PythonInterpreter, find_python_interpreter
from prebuildkit.cross.targets import TargetTriple
from prebuildkit.cross.toolchain import resolve_toolchain_env
from prebuildkit.link.emitter import LinkEmitter
from prebuildkit.pipeline.secondary import SecondaryDependencyPipeline, SecondaryResult
from prebuildkit.source.fetcher import Fetcher
from prebuildkit.source.patcher import SourcePatcher
from prebuildkit.source.resolver import SourceDescriptor, resolve_source

logger = logging.getLogger(__name__)


@dataclass
class OrchestrationResult:
    """Outcome of a complete orchestration run."""

    source: SourceDescriptor
    source_dir: Path
    build: BuildResult
    lib_dir: Path
    secondary: Optional[SecondaryResult] = None


class Orchestrator:
    """
    Turns a dependency manifest into a linkable library.

    Example:
        >>> build_env = BuildEnvironment.from_environ()
        >>> Orchestrator(load_manifest(), build_env).run()
    """

    def __init__(
        self,
        manifest: DependencyManifest,
        build_env: BuildEnvironment,
        fetcher: Optional[Fetcher] = None,
        emitter: Optional[LinkEmitter] = None,
        find_interpreter: Callable[..., PythonInterpreter] = find_python_interpreter,
    ):
        self.manifest = manifest
        self.build_env = build_env
        self.fetcher = fetcher or Fetcher()
        self.emitter = emitter or LinkEmitter(frameworks=manifest.frameworks)
        self.find_interpreter = find_interpreter
        self.synthesizer = FlagSynthesizer()

    def source(self) -> SourceDescriptor:
        return resolve_source(
            self.manifest.package,
            self.manifest.version,
            self.manifest.url,
            self.build_env.environ,
            prefix=self.manifest.prefix,
            repository=self.manifest.repository,
        )

    def context(self) -> BuildContext:
        triples = {}
        for variable, value in (("TARGET", self.build_env.target), ("HOST", self.build_env.host)):
            try:
                triples[variable] = TargetTriple.parse(value)
            except ValueError as e:
                raise InvalidEnvironmentError(variable, value, "not a target triple") from e
        target, host = triples["TARGET"], triples["HOST"]

        return BuildContext(
            target=target,
            host=host,
            profile=self.build_env.profile,
            num_jobs=self.build_env.num_jobs,
            shared=self.build_env.has_feature(self.manifest.shared_feature),
        )

    def create_integration(self) -> DriverIntegration:
        """Set up the primary driver integration, fetching waf if needed."""
        driver = self.manifest.driver

        if driver.kind == "make":
            return MakeDriver()

        waf_source = resolve_source(
            "waf",
            driver.version,
            driver.url,
            self.build_env.environ,
            prefix=driver.env_prefix,
        )
        waf_dir = self.build_env.out_dir / "waf" / waf_source.version
        self.fetcher.fetch(waf_source, waf_dir)
        return WafDriver(waf_dir / driver.script)

    def run(self) -> OrchestrationResult:
        """
        Execute the orchestration.

        Returns:
            OrchestrationResult

        Raises:
            PrebuildKitError: On any fetch, patch or build failure
        """
        context = self.context()
        out_dir = self.build_env.out_dir
        logger.info(
            f"Preparing {self.manifest.package} for {context.target} ({context.profile})"
        )

        secondary = None
        if self.manifest.secondary is not None:
            secondary = SecondaryDependencyPipeline(
                self.manifest.secondary,
                self.build_env,
                context,
                fetcher=self.fetcher,
                find_interpreter=self.find_interpreter,
            ).run()

        build_config = BuildConfig(
            pkg_config_dirs=(secondary.pkg_config_dir,) if secondary else ()
        )

        source = self.source()
        source_dir = out_dir / "source" / source.version
        build_dir = out_dir / "build" / source.version

        self.fetcher.fetch(source, source_dir)
        SourcePatcher.from_manifest(self.manifest.patch).patch(source_dir)

        integration = self.create_integration()

        flags = self.synthesizer.synthesize(
            feature_table(self.manifest.features, self.build_env.features),
            build_config,
            out_dir=build_dir,
            prefix=build_dir,
        )
        toolchain = resolve_toolchain_env(context.target, self.build_env.environ)
        env = self.build_env.child_environ([*toolchain, *flags.env])

        build = BuildInvoker(integration, self.find_interpreter).build(
            source_dir, build_dir, self.manifest.library, env, flags.args, context
        )

        lib_dir = integration.artifact_dir(build_dir)
        self.emitter.emit(self.manifest.library, lib_dir, context.shared, context.target)

        if secondary is not None and secondary.link:
            self.emitter.emit(
                secondary.library,
                secondary.lib_dir,
                secondary.shared,
                context.target,
                frameworks=False,
            )

        return OrchestrationResult(
            source=source,
            source_dir=source_dir,
            build=build,
            lib_dir=lib_dir,
            secondary=secondary,
        )
