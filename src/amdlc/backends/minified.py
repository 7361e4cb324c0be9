"""
Minified Emitter

All module files are parsed into one syntax tree, module id literals are
replaced by synthetic identifiers, and the result is spliced into the inline
loader's scope in place of its ``$code();`` statement before printing.
"""

import logging
from typing import List, Sequence

from calmjs.parse import asttypes

from .base import Emitter, dedupe_by_path, exposed_modules, global_alias, modules_by_path
from ..analysis.module_system.module_info import Module
from ..frontend.parser import ParseError, is_call_to, iter_nodes, parse_source, print_minified, print_source, statement_lists
from ..passes.ascii_only import to_ascii
from ..passes.dead_code import eliminate_dead_code
from ..passes.id_mangling import IdMangler, binding_statement, call_statement, rewrite_define_ids
from ..shared.errors import DeclarationEvaluationError, TemplateError
from ..utils.config import CODE_MARKER_NAME, EXPOSE_FUNCTION_NAME, INLINE_LOADER_TEMPLATE

logger = logging.getLogger(__name__)


def splice_statements(tree: asttypes.Node, marker: str, statements: List[asttypes.Node]) -> bool:
    """
    Replace the ``marker();`` expression statement in *tree* with *statements*.

    Rewrites *tree* in place; returns False when no marker statement exists.
    """
    for node in iter_nodes(tree):
        for body in statement_lists(node):
            for index, statement in enumerate(body):
                if isinstance(statement, asttypes.ExprStatement) and is_call_to(statement.expr, marker):
                    body[index:index + 1] = statements
                    return True
    return False


class MinifiedEmitter(Emitter):
    """Compressed bundle emitter (beautified when compression is disabled)."""

    template_name = INLINE_LOADER_TEMPLATE

    def emit(self, modules: Sequence[Module], output_path: str = "") -> str:
        compress = self.options.compress
        grouped = modules_by_path(modules)
        mangler = IdMangler()
        body: List[asttypes.Node] = []

        for module in dedupe_by_path(modules):
            try:
                tree = parse_source(module.source, module.file_path)
            except ParseError as e:
                raise DeclarationEvaluationError(module.file_path, e.message, e.location)
            rewrite_define_ids(tree, mangler)
            body.extend(tree.children())

            for aliased in self.global_aliases(grouped[module.file_path]):
                alias = global_alias(self.options.global_modules[aliased.id], mangler.name_for(aliased.id))
                body.extend(parse_source(alias, "<global alias>").children())

        statements: List[asttypes.Node] = []
        exposed = [mangler.name_for(m.id) for m in exposed_modules(modules)]
        if len(mangler):
            statements.append(binding_statement(mangler))
        statements.extend(body)
        if exposed:
            statements.append(call_statement(EXPOSE_FUNCTION_NAME, exposed))

        tree = parse_source(self.template, self.template_name)
        if not splice_statements(tree, CODE_MARKER_NAME, statements):
            raise TemplateError(f"{self.template_name} has no $code(); injection marker")

        if compress.enabled:
            if compress.dead_code:
                eliminate_dead_code(tree)
            if compress.mangle:
                # Identifier shortening needs scopes built from a freshly parsed tree
                tree = parse_source(print_source(tree), output_path or "<minified>")
            text = print_minified(tree, obfuscate=compress.mangle)
        else:
            text = print_source(tree)

        logger.debug(f"Minified bundle for {output_path or '<memory>'}: {len(mangler)} ids, {len(exposed)} exposed")
        text = text.strip() + "\n"

        if self.options.version and self.options.release_date:
            text = f"// {self.options.version} ({self.options.release_date})\n" + text
        return to_ascii(text)
