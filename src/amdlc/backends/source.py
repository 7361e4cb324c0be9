"""
Source Emitter

Readable bundle: every module file in discovery order behind an
``// Included from:`` comment, spliced as text into the inline loader.
"""

import json
import logging
from typing import Callable, Optional, Sequence

from .base import Emitter, dedupe_by_path, exposed_modules, global_alias, inject_code, modules_by_path
from ..analysis.module_system.module_info import Module
from ..shared.errors import Reporter
from ..utils.config import EXPOSE_FUNCTION_NAME, INCLUDED_FROM_PREFIX, INLINE_LOADER_TEMPLATE

logger = logging.getLogger(__name__)

Instrumenter = Callable[[str, str], str]


class SourceEmitter(Emitter):
    """
    Unminified bundle emitter.

    With an *instrumenter* each module source is passed through it before
    concatenation (coverage builds).
    """

    template_name = INLINE_LOADER_TEMPLATE

    def __init__(
        self,
        options,
        reporter: Optional[Reporter] = None,
        template: Optional[str] = None,
        instrumenter: Optional[Instrumenter] = None,
    ):
        super().__init__(options, reporter, template)
        self.instrumenter = instrumenter

    def emit(self, modules: Sequence[Module], output_path: str = "") -> str:
        grouped = modules_by_path(modules)
        source = ""

        for module in dedupe_by_path(modules):
            module_source = module.source.strip()
            if self.instrumenter is not None:
                module_source = self.instrumenter(module_source, module.file_path).strip()

            source += f"{INCLUDED_FROM_PREFIX}{module.file_path}\n\n"
            source += module_source + "\n\n"

            for aliased in self.global_aliases(grouped[module.file_path]):
                source += global_alias(self.options.global_modules[aliased.id], json.dumps(aliased.id)) + "\n\n"

        exposed = exposed_modules(modules)
        if exposed:
            ids = ",".join(json.dumps(m.id) for m in exposed)
            source += f"{EXPOSE_FUNCTION_NAME}([{ids}]);"

        logger.debug(f"Source bundle for {output_path or '<memory>'}: {len(grouped)} files, {len(exposed)} exposed")
        return inject_code(self.template, source.strip(), self.template_name)
