"""
Bundle Driver

Orchestrates one build: module graph discovery → change detection →
one emitter per configured output target.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .cache import BuildCache, compute_fingerprint
from .options import BuildOptions
from ..analysis.module_system.exposure import ExposurePolicy
from ..analysis.module_system.module_info import Module
from ..analysis.module_system.module_loader import ModuleGraphBuilder
from ..analysis.module_system.path_resolver import PathResolver
from ..backends.development import DevelopmentEmitter
from ..backends.minified import MinifiedEmitter
from ..backends.source import SourceEmitter
from ..shared.errors import BundleError, Reporter
from ..utils.io_utils import SourceCache, write_output_file

logger = logging.getLogger(__name__)

Instrumenter = Callable[[str, str], str]


@dataclass
class BuildResult:
    """
    Outcome of one build.

    success is False whenever a fatal diagnostic was reported; output files
    written before the failure must not be trusted. skipped is True when the
    fingerprint matched and nothing was regenerated.
    """
    success: bool
    reporter: Reporter
    modules: List[Module] = field(default_factory=list)
    fingerprint: Optional[str] = None
    skipped: bool = False
    outputs: Dict[str, str] = field(default_factory=dict)

    def has_errors(self) -> bool:
        return self.reporter.has_errors()


class BundleDriver:
    """
    Build session.

    Holds the per-process source cache (flushed at the start of every build)
    and an optional coverage instrumenter; everything else comes from the
    BuildOptions snapshot passed to ``build()``. Builds must not overlap on
    one driver instance.
    """

    def __init__(self, instrumenter: Optional[Instrumenter] = None):
        self.instrumenter = instrumenter
        self.source_cache = SourceCache()

    def build(self, options: BuildOptions, reporter: Optional[Reporter] = None) -> BuildResult:
        reporter = reporter if reporter is not None else Reporter()
        result = BuildResult(success=False, reporter=reporter)
        self.source_cache.clear()

        try:
            builder = ModuleGraphBuilder(
                options,
                reporter,
                path_resolver=PathResolver.from_options(options),
                exposure=ExposurePolicy.from_options(options),
                source_cache=self.source_cache,
            )
            result.modules = builder.build()

            result.fingerprint = compute_fingerprint(result.modules, builder.mtimes, options)
            if not BuildCache(force=options.force).should_rebuild(result.fingerprint, options.output_dev):
                reporter.info("Build is up to date, no outputs written")
                result.skipped = True
                result.success = True
                return result

            self._emit_outputs(options, reporter, result)
        except BundleError as e:
            reporter.report_exception(e)
            return result

        result.success = not reporter.has_fatal()
        return result

    def _emit_outputs(self, options: BuildOptions, reporter: Reporter, result: BuildResult) -> None:
        modules = result.modules

        if options.output_source:
            text = SourceEmitter(options, reporter).emit(modules, options.output_source)
            self._write(options.output_source, text, "source version", reporter, result)

        if options.output_coverage:
            if self.instrumenter is None:
                reporter.warning(f"Skipping coverage output {options.output_coverage}: no instrumenter configured")
            else:
                emitter = SourceEmitter(options, reporter, instrumenter=self.instrumenter)
                text = emitter.emit(modules, options.output_coverage)
                self._write(options.output_coverage, text, "coverage version", reporter, result)

        if options.output_minified:
            text = MinifiedEmitter(options, reporter).emit(modules, options.output_minified)
            self._write(options.output_minified, text, "compressed version", reporter, result)

        if options.output_dev:
            text = DevelopmentEmitter(options, reporter).emit(modules, options.output_dev, result.fingerprint)
            self._write(options.output_dev, text, "development version", reporter, result)

    def _write(self, path: str, text: str, label: str, reporter: Reporter, result: BuildResult) -> None:
        reporter.info(f"Writing {label} to: {path}")
        write_output_file(path, text)
        result.outputs[path] = text


def build(options, reporter: Optional[Reporter] = None, instrumenter: Optional[Instrumenter] = None) -> BuildResult:
    """
    Convenience entry point for build scripts.

    Usage:
        build({
            "from": "js/app/Main.js",
            "baseDir": "js",
            "rootNS": "app",
            "outputSource": "build/app.js",
            "outputMinified": "build/app.min.js",
            "outputDev": "build/app.dev.js",
        })
    """
    if not isinstance(options, BuildOptions):
        try:
            options = BuildOptions.from_dict(options)
        except BundleError as e:
            reporter = reporter if reporter is not None else Reporter()
            reporter.report_exception(e)
            return BuildResult(success=False, reporter=reporter)
    return BundleDriver(instrumenter=instrumenter).build(options, reporter)
