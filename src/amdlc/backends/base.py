"""
Emitter Base

Shared preprocessing for the three bundle emitters plus loader template
handling.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..analysis.module_system.module_info import Module
from ..shared.errors import Reporter, TemplateError
from ..utils.config import CODE_MARKER_PATTERN
from ..utils.io_utils import read_source_file

logger = logging.getLogger(__name__)

LOADERS_DIR = Path(__file__).parent.parent / "loaders"

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def load_template(name: str) -> str:
    """Read a loader template shipped in the loaders directory."""
    return read_source_file(LOADERS_DIR / name)


def inject_code(template: str, code: str, template_name: str = "loader template") -> str:
    """Replace the ``$code();`` marker statement of *template* with *code*."""
    pattern = re.compile(CODE_MARKER_PATTERN)
    if not pattern.search(template):
        raise TemplateError(f"{template_name} has no $code(); injection marker")
    return pattern.sub(lambda _: "\n\n" + code, template)


def dedupe_by_path(modules: Sequence[Module]) -> List[Module]:
    """First module record per file path, in first-seen order."""
    seen = set()
    unique = []
    for module in modules:
        if module.file_path in seen:
            continue
        seen.add(module.file_path)
        unique.append(module)
    return unique


def exposed_modules(modules: Sequence[Module]) -> List[Module]:
    """Public modules, one per id, in discovery order."""
    seen = set()
    exposed = []
    for module in modules:
        if module.is_public and module.id not in seen:
            seen.add(module.id)
            exposed.append(module)
    return exposed


def modules_by_path(modules: Sequence[Module]) -> Dict[str, List[Module]]:
    grouped: Dict[str, List[Module]] = {}
    for module in modules:
        grouped.setdefault(module.file_path, []).append(module)
    return grouped


def global_alias(global_name: str, module_ref: str) -> str:
    """``exports.Name = modules[ref];`` where *module_ref* is a JS expression."""
    if _IDENTIFIER_RE.match(global_name):
        target = f"exports.{global_name}"
    else:
        target = f"exports[{json.dumps(global_name)}]"
    return f"{target} = modules[{module_ref}];"


class Emitter(ABC):
    """
    Base class for bundle emitters.

    Emitters are pure: they return the artifact text and never touch the
    file system; the driver writes the result.
    """

    template_name: str = ""

    def __init__(self, options, reporter: Optional[Reporter] = None, template: Optional[str] = None):
        self.options = options
        self.reporter = reporter or Reporter()
        self._template = template

    @property
    def template(self) -> str:
        if self._template is None:
            self._template = load_template(self.template_name)
        return self._template

    def global_aliases(self, modules: Sequence[Module]) -> List[Module]:
        """Modules from *modules* that have a global variable name configured."""
        return [m for m in modules if m.id in self.options.global_modules]

    @abstractmethod
    def emit(self, modules: Sequence[Module], output_path: str) -> str:
        """Produce the artifact text for *modules*."""
        raise NotImplementedError
