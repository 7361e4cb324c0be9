"""
Module Path Resolution

Pure path resolution for AMD module ids.

- app.ui.Button         → <baseDir>/app/ui/Button.js (or ui/Button.js with rootNS 'app')
- moxie.file.FileInput  → <libs.moxie.baseDir>/file/FileInput.js (library rootNS 'moxie')
- ids in moduleOverrides map straight to their configured file

This class is stateless and can be shared/reused.
"""

import logging
import posixpath
from typing import Dict, Mapping, Optional, Tuple

from .module_info import LibraryMapping
from ...utils.config import MODULE_FILE_EXTENSION, NAMESPACE_SEPARATORS
from ...utils.io_utils import to_unix_path

logger = logging.getLogger(__name__)


def in_namespace(module_id: str, namespace: str) -> bool:
    """
    True when *module_id* is *namespace* itself or lives below it.

    'app.ui.Button' and 'app/ui/Button' are both in 'app'; 'application.X' is not.
    """
    if not namespace:
        return False
    if module_id == namespace:
        return True
    return any(module_id.startswith(namespace + sep) for sep in NAMESPACE_SEPARATORS)


def strip_namespace(module_id: str, namespace: Optional[str]) -> str:
    """Drop a leading *namespace* segment (and its separator) from *module_id*."""
    if namespace and in_namespace(module_id, namespace) and module_id != namespace:
        return module_id[len(namespace) + 1:]
    return module_id


def id_to_relative_path(module_id: str) -> str:
    """'app.ui.Button' → 'app/ui/Button.js'"""
    return module_id.replace(".", "/") + MODULE_FILE_EXTENSION


class PathResolver:
    """
    Resolves module ids to candidate file-system paths.

    Resolution order:
    1. per-id override table (literal path, no further processing)
    2. library namespaces (against the library's baseDir, minus its rootNS)
    3. the build's baseDir, minus the global rootNS

    Paths are returned normalized with forward slashes; existence is not
    checked here (the graph builder reports missing files).
    """

    def __init__(
        self,
        base_dir: str = ".",
        root_ns: Optional[str] = None,
        libs: Optional[Mapping[str, LibraryMapping]] = None,
        overrides: Optional[Mapping[str, str]] = None,
    ):
        self.base_dir = to_unix_path(base_dir) or "."
        self.root_ns = root_ns or None
        self.libs: Dict[str, LibraryMapping] = dict(libs or {})
        self.overrides: Dict[str, str] = dict(overrides or {})

    @classmethod
    def from_options(cls, options) -> "PathResolver":
        """Resolver configured from a BuildOptions snapshot."""
        return cls(
            base_dir=options.effective_base_dir,
            root_ns=options.root_ns,
            libs=options.libs,
            overrides=options.module_overrides,
        )

    def library_for(self, module_id: str) -> Optional[Tuple[str, LibraryMapping]]:
        """The library namespace *module_id* belongs to, longest name first."""
        for name in sorted(self.libs, key=len, reverse=True):
            if in_namespace(module_id, name):
                return name, self.libs[name]
        return None

    def resolve(self, module_id: str) -> str:
        """
        Resolve a module id to a file path.

        Examples:
            resolve('app.ui.Button')            → 'src/ui/Button.js'   (baseDir 'src', rootNS 'app')
            resolve('moxie/file/FileInput')     → 'lib/moxie/file/FileInput.js'
        """
        if module_id in self.overrides:
            path = to_unix_path(self.overrides[module_id])
            logger.debug(f"PathResolver: {module_id} → {path} (override)")
            return path

        library = self.library_for(module_id)
        if library is not None:
            name, lib = library
            base_dir = to_unix_path(lib.base_dir) or "."
            relative_id = strip_namespace(module_id, lib.root_ns)
        else:
            base_dir = self.base_dir
            relative_id = strip_namespace(module_id, self.root_ns)

        path = to_unix_path(posixpath.join(base_dir, id_to_relative_path(relative_id)))
        logger.debug(f"PathResolver: {module_id} → {path}")
        return path

    def should_load(self, module_id: str) -> bool:
        """
        True if *module_id* is to be inlined into the bundle.

        Ids outside the root namespace (when one is configured) and outside
        every library namespace are expected to be provided at runtime.
        """
        if self.library_for(module_id) is not None:
            return True
        if not self.root_ns:
            return True
        return in_namespace(module_id, self.root_ns)

    def is_library_module(self, module_id: str) -> bool:
        return self.library_for(module_id) is not None
