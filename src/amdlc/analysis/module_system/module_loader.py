"""
Module Loader

Discovers the module dependency graph starting from entry files.

This class handles:
- Entry expansion (single paths, glob patterns, lists, in-memory sources)
- Source loading from disk or from the in-memory ``moduleSources`` overlay
- @@token@@ substitution before parsing
- Structural extraction of define() declarations
- Depth-first dependency discovery with a visited-before-recursing guard
"""

import glob
import logging
import os
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .exposure import ExposurePolicy
from .module_info import InlineSource, Module
from .path_resolver import PathResolver
from ...frontend.parser import ParseError, find_define_calls, parse_source
from ...shared.errors import (
    AnonymousModuleWarning,
    ArityMismatchWarning,
    DeclarationEvaluationError,
    DuplicateModuleIdWarning,
    MissingFileError,
    NoModulesDiscoveredError,
    Reporter,
)
from ...utils.config import (
    MAJOR_VERSION_TOKEN,
    MINOR_VERSION_TOKEN,
    RELEASE_DATE_TOKEN,
    VERSION_TOKEN,
)
from ...utils.io_utils import SourceCache, to_unix_path

logger = logging.getLogger(__name__)

Entry = Union[str, InlineSource]

_GLOB_CHARS = ("*", "?", "[")


def substitute_tokens(source: str, options) -> str:
    """Replace @@version@@ style placeholders with the configured values."""
    replacements = (
        (VERSION_TOKEN, options.version),
        (MAJOR_VERSION_TOKEN, options.major_version if options.version else None),
        (MINOR_VERSION_TOKEN, options.minor_version if options.version else None),
        (RELEASE_DATE_TOKEN, options.release_date),
    )
    for token, value in replacements:
        if value is not None:
            source = source.replace(token, value)
    return source


def is_glob_pattern(pattern: str) -> bool:
    return any(ch in pattern for ch in _GLOB_CHARS)


class ModuleGraphBuilder:
    """
    Builds the ordered module list for one build.

    Modules are appended once all of their dependencies have been parsed, so
    the list leans dependencies-first. A dependency cycle is broken by the
    visited set: each member is recorded exactly once but the order inside a
    cycle is not guaranteed to be topological.

    One instance serves one build; the visited set and the module list are
    owned by the instance and reset by ``build()``.
    """

    def __init__(
        self,
        options,
        reporter: Optional[Reporter] = None,
        path_resolver: Optional[PathResolver] = None,
        exposure: Optional[ExposurePolicy] = None,
        source_cache: Optional[SourceCache] = None,
    ):
        self.options = options
        self.reporter = reporter or Reporter()
        self.path_resolver = path_resolver or PathResolver.from_options(options)
        self.exposure = exposure or ExposurePolicy.from_options(options)
        self.source_cache = source_cache if source_cache is not None else SourceCache()

        self.modules: List[Module] = []
        self.visited: Set[str] = set()
        self.mtimes: Dict[str, float] = {}
        self._loading_stack: List[str] = []
        self._ids: Dict[str, str] = {}
        self._inline_count = 0

    @property
    def max_mtime(self) -> float:
        """Latest modification time seen across all files loaded from disk."""
        return max(self.mtimes.values(), default=0.0)

    def build(self, entry_patterns: Optional[Union[Entry, Sequence[Entry]]] = None) -> List[Module]:
        """
        Discover all modules reachable from *entry_patterns* (defaults to the
        snapshot's ``from`` entries).

        Raises:
            MissingFileError: an entry or dependency file does not exist
            DeclarationEvaluationError: a module source could not be read/parsed
            NoModulesDiscoveredError: nothing was discovered at all
        """
        if entry_patterns is None:
            entry_patterns = self.options.entries
        elif isinstance(entry_patterns, (str, InlineSource)):
            entry_patterns = (entry_patterns,)

        self.modules = []
        self.visited = set()
        self.mtimes = {}
        self._loading_stack = []
        self._ids = {}
        self._inline_count = 0

        for entry in self.expand_entries(entry_patterns):
            if isinstance(entry, InlineSource):
                self._process_inline(entry)
            else:
                self._process_file(entry)

        if not self.modules:
            raise NoModulesDiscoveredError(list(self._describe(entry_patterns)))

        logger.debug(f"Discovered {len(self.modules)} modules in {len(self.visited)} files")
        return list(self.modules)

    def expand_entries(self, entry_patterns: Iterable[Entry]) -> List[Entry]:
        """Expand glob patterns; plain paths and in-memory entries pass through."""
        expanded: List[Entry] = []
        for entry in entry_patterns:
            if isinstance(entry, InlineSource):
                expanded.append(entry)
            elif is_glob_pattern(entry):
                matches = sorted(glob.glob(entry, recursive=True))
                if not matches:
                    self.reporter.debug(f"Pattern {entry} matched no files")
                expanded.extend(to_unix_path(match) for match in matches if os.path.isfile(match))
            else:
                expanded.append(to_unix_path(entry))
        return expanded

    def _describe(self, entry_patterns: Iterable[Entry]) -> Iterable[str]:
        for entry in entry_patterns:
            if isinstance(entry, InlineSource):
                yield entry.path or "<inline>"
            else:
                yield entry

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _process_inline(self, entry: InlineSource) -> None:
        if entry.path and os.path.isfile(entry.path):
            # an existing file always wins over the supplied text
            self._process_file(to_unix_path(entry.path))
            return
        if entry.path:
            identity = to_unix_path(entry.path)
        else:
            self._inline_count += 1
            identity = f"<inline:{self._inline_count}>"
        if not self._mark_visited(identity):
            return
        self._process_source(identity, entry.source, in_memory=True)

    def _process_file(self, file_path: str, referrer: Optional[str] = None, referrer_id: Optional[str] = None) -> None:
        if not self._mark_visited(file_path):
            return

        if os.path.isfile(file_path):
            try:
                source = self.source_cache.read(file_path)
                self.mtimes[file_path] = self.source_cache.mtime(file_path)
            except (OSError, UnicodeDecodeError) as e:
                raise DeclarationEvaluationError(file_path, str(e))
            in_memory = False
        elif file_path in self.options.module_sources:
            source = self.options.module_sources[file_path]
            in_memory = True
        else:
            raise MissingFileError(file_path, referrer, referrer_id)

        self._process_source(file_path, source, in_memory)

    def _mark_visited(self, identity: str) -> bool:
        """Record *identity* before recursing; False if it was seen already."""
        if identity in self.visited:
            if identity in self._loading_stack:
                chain = " -> ".join(self._loading_stack + [identity])
                logger.debug(f"Dependency cycle tolerated: {chain}")
            return False
        self.visited.add(identity)
        return True

    def _process_source(self, file_path: str, source: str, in_memory: bool) -> None:
        logger.debug(f"Parsing module file: {file_path}")
        source = substitute_tokens(source, self.options)
        self.reporter.source_files[file_path] = source

        try:
            tree = parse_source(source, file_path)
            define_calls = find_define_calls(tree, file_path)
        except ParseError as e:
            raise DeclarationEvaluationError(file_path, e.message, e.location)
        except ValueError as e:
            raise DeclarationEvaluationError(file_path, str(e))

        self._loading_stack.append(file_path)
        try:
            for call in define_calls:
                if call.id is None:
                    self.reporter.report_warning(AnonymousModuleWarning(
                        f"define() without a literal module id in {file_path} is ignored",
                        call.location,
                    ))
                    continue

                if call.factory_params is not None and call.factory_params != len(call.deps):
                    self.reporter.report_warning(ArityMismatchWarning(
                        call.id, len(call.deps), call.factory_params, call.location,
                    ))

                self._load_dependencies(call.id, call.deps, file_path)
                self._register(Module(
                    id=call.id,
                    file_path=file_path,
                    source=source,
                    deps=call.deps,
                    is_public=self.exposure.is_exposed(call.id, source),
                    in_memory=in_memory,
                    location=call.location,
                ))
        finally:
            self._loading_stack.pop()

    def _load_dependencies(self, module_id: str, deps: Tuple[str, ...], file_path: str) -> None:
        for dep_id in deps:
            if not self.path_resolver.should_load(dep_id):
                logger.debug(f"Not loading {dep_id}: outside the configured namespaces")
                continue
            dep_path = self.path_resolver.resolve(dep_id)
            self._process_file(dep_path, referrer=file_path, referrer_id=module_id)

    def _register(self, module: Module) -> None:
        previous_path = self._ids.get(module.id)
        if previous_path is not None and previous_path != module.file_path:
            self.reporter.report_warning(DuplicateModuleIdWarning(
                f"module '{module.id}' is defined in both {previous_path} and {module.file_path}",
                module.location,
            ))
        self._ids.setdefault(module.id, module.file_path)
        self.modules.append(module)
