"""
Development Emitter

Emits a loader that pulls each module file in with its own script tag, so
browsers show the original files while debugging. Modules that only exist
in memory are embedded as inline scripts instead.
"""

import json
import logging
import posixpath
from typing import Optional, Sequence

from .base import Emitter, dedupe_by_path, exposed_modules, inject_code
from ..analysis.module_system.module_info import Module
from ..utils.config import (
    DEV_LOADER_TEMPLATE,
    EXPOSE_FUNCTION_NAME,
    FILE_NAME_TOKEN,
    FLUSH_FUNCTION_NAME,
    HASH_MARKER_FORMAT,
    INLINE_FUNCTION_NAME,
    LOAD_FUNCTION_NAME,
)
from ..utils.io_utils import relative_unix_path, to_unix_path

logger = logging.getLogger(__name__)

_STRING_ESCAPES = {
    "\\": "\\\\",
    "'": "\\'",
    "^": "\\^",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def escape_js_string(source: str) -> str:
    """
    Escape *source* for a single-quoted JavaScript string literal.

    ``</`` becomes ``<\\/`` so an embedded ``</script>`` cannot close the
    surrounding tag. Removing each escaping backslash (and mapping \\n, \\r,
    \\t back) restores the input exactly.
    """
    escaped = "".join(_STRING_ESCAPES.get(ch, ch) for ch in source)
    return escaped.replace("</", "<\\/")


class DevelopmentEmitter(Emitter):
    """Per-file loader bundle; the driver passes the build fingerprint for the hash marker."""

    template_name = DEV_LOADER_TEMPLATE

    def emit(self, modules: Sequence[Module], output_path: str, fingerprint: Optional[str] = None) -> str:
        output_path = to_unix_path(output_path)
        output_dir = posixpath.dirname(output_path) or "."
        lines = []

        exposed = exposed_modules(modules)
        if exposed:
            ids = ",".join(json.dumps(m.id) for m in exposed)
            lines.append(f"{EXPOSE_FUNCTION_NAME}([{ids}]);")

        if self.options.global_modules:
            lines.append(f"globals = {json.dumps(self.options.global_modules, sort_keys=True)};")

        if lines:
            lines.append("")

        for module in dedupe_by_path(modules):
            if module.in_memory:
                lines.append(f"{INLINE_FUNCTION_NAME}('{escape_js_string(module.source)}');")
            else:
                lines.append(f"{LOAD_FUNCTION_NAME}('{relative_unix_path(module.file_path, output_dir)}');")

        lines.append("")
        lines.append(f"{FLUSH_FUNCTION_NAME}();")

        code = "\t" + "\n\t".join(lines).strip()
        template = self.template.replace(FILE_NAME_TOKEN, posixpath.basename(output_path))
        text = inject_code(template, code.replace("\n\t\n", "\n\n"), self.template_name)

        if self.options.hash and fingerprint:
            text = text.rstrip("\n") + "\n\n" + HASH_MARKER_FORMAT.format(digest=fingerprint) + "\n"
        return text
