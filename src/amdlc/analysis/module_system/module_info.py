"""
Module System Types

Pure data structures shared between discovery, caching and emitters.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from ...shared.source_location import SourceLocation


@dataclass(frozen=True)
class Module:
    """
    One parsed ``define(id, deps, factory)`` declaration.

    - id: dot or slash delimited module id (e.g. 'app.ui.Button')
    - file_path: canonical forward-slash path (synthetic '<inline:N>' for
      in-memory entries that were given no path)
    - source: source text after @@token@@ substitution
    - deps: dependency ids exactly as declared (duplicates kept)
    - is_public: exposure decision taken at discovery time
    - in_memory: True when the source did not come from a file on disk
    """
    id: str
    file_path: str
    source: str
    deps: Tuple[str, ...] = ()
    is_public: bool = True
    in_memory: bool = False
    location: Optional[SourceLocation] = None

    def __str__(self) -> str:
        """Human-readable representation"""
        return f"Module({self.id}, {len(self.deps)} deps, {self.file_path})"

    def __repr__(self) -> str:
        """Developer representation"""
        return (f"Module(id={self.id!r}, file_path={self.file_path!r}, "
                f"deps={list(self.deps)}, is_public={self.is_public}, in_memory={self.in_memory})")


@dataclass(frozen=True)
class InlineSource:
    """Entry whose source is supplied in memory instead of read from disk."""
    source: str
    path: Optional[str] = None


@dataclass(frozen=True)
class LibraryMapping:
    """
    External namespace resolved against its own base directory.

    root_ns is stripped from ids before resolving (when set); expose follows
    the same forms as the top-level ``expose`` option.
    """
    base_dir: str
    root_ns: Optional[str] = None
    expose: Union[bool, str, Tuple[str, ...]] = True
