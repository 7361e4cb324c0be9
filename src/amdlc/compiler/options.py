"""
Build Options

Immutable configuration snapshot threaded through every build component.

The accepted option surface mirrors the camelCase keys build scripts pass in
(``from``, ``baseDir``, ``rootNS``, ...); ``BuildOptions.from_dict`` maps them
onto the snake_case fields below and ``to_dict`` maps them back for
serialization (the build fingerprint hashes that form).
"""

import dataclasses
import json
import logging
import posixpath
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from ..analysis.module_system.module_info import InlineSource, LibraryMapping
from ..shared.errors import ConfigurationError
from ..utils.io_utils import to_unix_path

logger = logging.getLogger(__name__)

EXPOSE_PUBLIC = "public"

Entry = Union[str, InlineSource]
ExposeSetting = Union[bool, str, Tuple[str, ...]]


@dataclass(frozen=True)
class CompressOptions:
    """
    Minification settings (the object form of the ``compress`` option).

    enabled=False prints the minified bundle beautified with no transforms.
    """
    enabled: bool = True
    mangle: bool = True
    dead_code: bool = True

    @classmethod
    def coerce(cls, value: Any) -> "CompressOptions":
        if isinstance(value, CompressOptions):
            return value
        if value is None or value is True:
            return cls()
        if value is False:
            return cls(enabled=False, mangle=False, dead_code=False)
        if isinstance(value, Mapping):
            unknown = set(value) - {"mangle", "deadCode", "dead_code"}
            if unknown:
                raise ConfigurationError(f"unknown compress settings: {sorted(unknown)}")
            return cls(
                enabled=True,
                mangle=bool(value.get("mangle", True)),
                dead_code=bool(value.get("deadCode", value.get("dead_code", True))),
            )
        raise ConfigurationError(f"compress must be a bool or an object, got {value!r}")

    def to_json(self) -> Union[bool, Dict[str, bool]]:
        if not self.enabled:
            return False
        return {"mangle": self.mangle, "deadCode": self.dead_code}


def _coerce_expose(value: Any, where: str = "expose") -> ExposeSetting:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value != EXPOSE_PUBLIC:
            raise ConfigurationError(f"{where} must be false, true, \"public\" or a list of ids, got {value!r}")
        return value
    if isinstance(value, (list, tuple)):
        if not all(isinstance(item, str) for item in value):
            raise ConfigurationError(f"{where} list must only contain module ids")
        return tuple(value)
    raise ConfigurationError(f"{where} must be false, true, \"public\" or a list of ids, got {value!r}")


def _coerce_entry(value: Any) -> Entry:
    if isinstance(value, (str, InlineSource)):
        return value
    if isinstance(value, Mapping) and "source" in value:
        return InlineSource(source=value["source"], path=value.get("path"))
    raise ConfigurationError(f"entry must be a path, a glob pattern or {{source, path}}, got {value!r}")


def _coerce_entries(value: Any) -> Tuple[Entry, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(_coerce_entry(item) for item in value)
    return (_coerce_entry(value),)


def _coerce_library(name: str, value: Any) -> LibraryMapping:
    if isinstance(value, LibraryMapping):
        return value
    if not isinstance(value, Mapping) or "baseDir" not in value:
        raise ConfigurationError(f"library '{name}' needs at least a baseDir")
    return LibraryMapping(
        base_dir=value["baseDir"],
        root_ns=value.get("rootNS"),
        expose=_coerce_expose(value.get("expose", True), f"libs.{name}.expose"),
    )


def _string_map(value: Any, key: str) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"{key} must be an object mapping strings to strings")
    return {str(k): str(v) for k, v in value.items()}


# camelCase option key -> dataclass field
_OPTION_KEYS = {
    "from": "entries",
    "baseDir": "base_dir",
    "rootNS": "root_ns",
    "compress": "compress",
    "expose": "expose",
    "version": "version",
    "releaseDate": "release_date",
    "force": "force",
    "hash": "hash",
    "outputSource": "output_source",
    "outputMinified": "output_minified",
    "outputDev": "output_dev",
    "outputCoverage": "output_coverage",
    "libs": "libs",
    "moduleOverrides": "module_overrides",
    "globalModules": "global_modules",
    "moduleSources": "module_sources",
}


@dataclass(frozen=True)
class BuildOptions:
    """
    Resolved configuration for one build invocation.

    Never mutated once a build starts; use ``replace()`` to derive a new
    snapshot beforehand.
    """
    entries: Tuple[Entry, ...] = ()
    base_dir: Optional[str] = None
    root_ns: Optional[str] = None
    compress: CompressOptions = field(default_factory=CompressOptions)
    expose: ExposeSetting = True
    version: Optional[str] = None
    release_date: Optional[str] = None
    force: bool = False
    hash: bool = True
    output_source: Optional[str] = None
    output_minified: Optional[str] = None
    output_dev: Optional[str] = None
    output_coverage: Optional[str] = None
    libs: Dict[str, LibraryMapping] = field(default_factory=dict)
    module_overrides: Dict[str, str] = field(default_factory=dict)
    global_modules: Dict[str, str] = field(default_factory=dict)
    module_sources: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, options: Mapping[str, Any]) -> "BuildOptions":
        """Build a snapshot from the camelCase option surface."""
        unknown = set(options) - set(_OPTION_KEYS)
        if unknown:
            raise ConfigurationError(f"unknown build options: {', '.join(sorted(unknown))}")

        libs = options.get("libs") or {}
        if not isinstance(libs, Mapping):
            raise ConfigurationError("libs must be an object mapping namespaces to library settings")

        return cls(
            entries=_coerce_entries(options.get("from")),
            base_dir=options.get("baseDir"),
            root_ns=options.get("rootNS") or None,
            compress=CompressOptions.coerce(options.get("compress", True)),
            expose=_coerce_expose(options.get("expose", True)),
            version=options.get("version"),
            release_date=options.get("releaseDate"),
            force=bool(options.get("force", False)),
            hash=bool(options.get("hash", True)),
            output_source=options.get("outputSource"),
            output_minified=options.get("outputMinified"),
            output_dev=options.get("outputDev"),
            output_coverage=options.get("outputCoverage"),
            libs={name: _coerce_library(name, value) for name, value in libs.items()},
            module_overrides=_string_map(options.get("moduleOverrides"), "moduleOverrides"),
            global_modules=_string_map(options.get("globalModules"), "globalModules"),
            module_sources={to_unix_path(k): v for k, v in _string_map(options.get("moduleSources"), "moduleSources").items()},
        )

    def replace(self, **changes: Any) -> "BuildOptions":
        """Return a copy with *changes* applied (only before a build starts)."""
        return dataclasses.replace(self, **changes)

    @property
    def effective_base_dir(self) -> str:
        """Explicit base dir, else the directory of the first path entry."""
        if self.base_dir is not None:
            return to_unix_path(self.base_dir) or "."
        for entry in self.entries:
            path = entry if isinstance(entry, str) else entry.path
            if path:
                return to_unix_path(posixpath.dirname(to_unix_path(path))) or "."
        return "."

    @property
    def major_version(self) -> str:
        return (self.version or "").split(".")[0]

    @property
    def minor_version(self) -> str:
        return ".".join((self.version or "").split(".")[1:])

    def has_outputs(self) -> bool:
        return any((self.output_source, self.output_minified, self.output_dev, self.output_coverage))

    def to_dict(self) -> Dict[str, Any]:
        """
        Canonical camelCase form (JSON serializable).

        ``force`` is left out: it only steers the rebuild check.
        """
        def entry_json(entry: Entry) -> Any:
            if isinstance(entry, InlineSource):
                return {"source": entry.source, "path": entry.path}
            return entry

        def expose_json(expose: ExposeSetting) -> Any:
            return list(expose) if isinstance(expose, tuple) else expose

        return {
            "from": [entry_json(e) for e in self.entries],
            "baseDir": self.base_dir,
            "rootNS": self.root_ns,
            "compress": self.compress.to_json(),
            "expose": expose_json(self.expose),
            "version": self.version,
            "releaseDate": self.release_date,
            "hash": self.hash,
            "outputSource": self.output_source,
            "outputMinified": self.output_minified,
            "outputDev": self.output_dev,
            "outputCoverage": self.output_coverage,
            "libs": {
                name: {"baseDir": lib.base_dir, "rootNS": lib.root_ns, "expose": expose_json(lib.expose)}
                for name, lib in self.libs.items()
            },
            "moduleOverrides": dict(self.module_overrides),
            "globalModules": dict(self.global_modules),
            "moduleSources": dict(self.module_sources),
        }

    def serialize(self) -> str:
        """Stable JSON text of the snapshot (sorted keys)."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))


def load_options_file(path: str) -> Dict[str, Any]:
    """Read a JSON build configuration file into an option mapping."""
    from ..utils.io_utils import read_source_file
    try:
        data = json.loads(read_source_file(path))
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"could not read build configuration {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"build configuration {path} must contain a JSON object")
    logger.debug(f"Loaded build configuration from {path}")
    return data
