"""
Centralized file I/O utilities.

- Single place for encoding and forward-slash path handling
- Per-build source cache (flushed by the driver at the start of each build)
"""

import logging
import os
import posixpath
from pathlib import Path
from typing import Dict, Union

from .config import DEFAULT_FILE_ENCODING

logger = logging.getLogger(__name__)


def read_source_file(path: Union[Path, str]) -> str:
    """Read source file with standard encoding."""
    p = Path(path) if not isinstance(path, Path) else path
    return p.read_text(encoding=DEFAULT_FILE_ENCODING)


def write_output_file(path: Union[Path, str], content: str) -> Path:
    """Write an output artifact, creating its parent directories first."""
    p = Path(path) if not isinstance(path, Path) else path
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding=DEFAULT_FILE_ENCODING)
    return p


def to_unix_path(path: Union[Path, str]) -> str:
    """Normalize a path to forward slashes (``a\\b/../c`` -> ``a/c``)."""
    text = str(path).replace("\\", "/")
    if not text:
        return text
    return posixpath.normpath(text)


def relative_unix_path(path: Union[Path, str], start: Union[Path, str]) -> str:
    """Forward-slash path of *path* relative to the directory *start*."""
    return to_unix_path(os.path.relpath(str(path), str(start) or "."))


class SourceCache:
    """
    Path keyed cache of file contents and modification times.

    One instance lives for the duration of a single build; the driver calls
    ``clear()`` before discovery starts so edits between builds are seen.
    """

    def __init__(self):
        self._contents: Dict[str, str] = {}
        self._mtimes: Dict[str, float] = {}

    def read(self, path: str) -> str:
        if path not in self._contents:
            self._contents[path] = read_source_file(path)
            logger.debug(f"SourceCache: read {path}")
        return self._contents[path]

    def mtime(self, path: str) -> float:
        if path not in self._mtimes:
            self._mtimes[path] = os.path.getmtime(path)
        return self._mtimes[path]

    def clear(self) -> None:
        self._contents.clear()
        self._mtimes.clear()

    def __contains__(self, path: str) -> bool:
        return path in self._contents

    def __len__(self) -> int:
        return len(self._contents)
