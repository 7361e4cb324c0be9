"""
Build Cache

Whole-build change detection. The fingerprint covers every module file's
path and modification time plus the serialized build options; the previous
fingerprint is read back from the ``// $hash: <hex>`` marker at the end of
the development bundle.
"""

import hashlib
import logging
import os
import re
from typing import Mapping, Optional, Sequence

from ..analysis.module_system.module_info import Module
from ..utils.config import DEFAULT_FILE_ENCODING, HASH_MARKER_PATTERN, HASH_MARKER_SCAN_BYTES

logger = logging.getLogger(__name__)

_HASH_MARKER_RE = re.compile(HASH_MARKER_PATTERN)


def compute_fingerprint(modules: Sequence[Module], mtimes: Mapping[str, float], options) -> str:
    """
    Digest of (ordered module paths + their mtimes + serialized options).

    In-memory modules contribute their path with mtime 0; their sources are
    part of the serialized options.
    """
    digest = hashlib.sha256()
    for module in modules:
        mtime = mtimes.get(module.file_path, 0.0)
        digest.update(f"{module.file_path}\0{mtime!r}\n".encode(DEFAULT_FILE_ENCODING))
    digest.update(options.serialize().encode(DEFAULT_FILE_ENCODING))
    return digest.hexdigest()


def read_previous_fingerprint(output_path: Optional[str]) -> Optional[str]:
    """Fingerprint recorded at the end of *output_path*, if any."""
    if not output_path or not os.path.isfile(output_path):
        return None
    with open(output_path, "rb") as f:
        f.seek(0, os.SEEK_END)
        size = f.tell()
        f.seek(max(0, size - HASH_MARKER_SCAN_BYTES))
        tail = f.read().decode(DEFAULT_FILE_ENCODING, errors="replace")
    match = _HASH_MARKER_RE.search(tail)
    return match.group(1).lower() if match else None


class BuildCache:
    """Decides whether a build has to regenerate its outputs."""

    def __init__(self, force: bool = False):
        self.force = force

    def should_rebuild(self, current_fingerprint: str, output_path: Optional[str]) -> bool:
        if self.force:
            logger.debug("Rebuild forced")
            return True
        previous = read_previous_fingerprint(output_path)
        if previous is None:
            logger.debug(f"No previous build fingerprint in {output_path}")
            return True
        if previous != current_fingerprint.lower():
            logger.debug(f"Build fingerprint changed ({previous[:12]} → {current_fingerprint[:12]})")
            return True
        return False
