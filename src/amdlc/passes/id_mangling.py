"""
Module Id Mangling

Replaces module id string literals inside define() calls with synthetic
identifiers, so each id string appears exactly once in the minified bundle
(in the binding block) and every reference can be shortened by the minifier.

The id → identifier mapping is injective and built in first-seen order.
"""

import json
import logging
import re
from typing import Dict, Iterable, List, Set, Tuple

from calmjs.parse import asttypes

from ..frontend.parser import call_arguments, find_define_calls, parse_source

logger = logging.getLogger(__name__)

_NON_IDENTIFIER_RE = re.compile(r"[^A-Za-z0-9_$]")


class IdMangler:
    """
    Injective mapping from module id to synthetic identifier.

    'app.ui.Button' → '_app_ui_Button'; when two ids sanitize to the same
    name the later one gets a numeric suffix ('_a_b', '_a_b_2').
    """

    def __init__(self):
        self._names: Dict[str, str] = {}
        self._taken: Set[str] = set()

    def name_for(self, module_id: str) -> str:
        name = self._names.get(module_id)
        if name is not None:
            return name

        base = "_" + _NON_IDENTIFIER_RE.sub("_", module_id)
        name = base
        suffix = 2
        while name in self._taken:
            name = f"{base}_{suffix}"
            suffix += 1

        self._names[module_id] = name
        self._taken.add(name)
        return name

    def items(self) -> List[Tuple[str, str]]:
        """(id, identifier) pairs in first-seen order."""
        return list(self._names.items())

    def __contains__(self, module_id: str) -> bool:
        return module_id in self._names

    def __len__(self) -> int:
        return len(self._names)


def rewrite_define_ids(tree: asttypes.Node, mangler: IdMangler) -> int:
    """
    Rewrite every define() call in *tree* in place.

    The id literal and each dependency literal become Identifier nodes named
    by *mangler*. *tree* must be a freshly parsed tree owned by the caller.
    Returns the number of rewritten calls.
    """
    rewritten = 0
    for call in find_define_calls(tree):
        if call.id is None:
            continue
        args = call_arguments(call.node)
        items = call.node.args.items if isinstance(call.node.args, asttypes.Arguments) else call.node.args

        items[0] = asttypes.Identifier(mangler.name_for(call.id))
        if len(args) >= 3 and isinstance(args[1], asttypes.Array):
            dep_items = args[1].items
            for index, dep_id in enumerate(call.deps):
                dep_items[index] = asttypes.Identifier(mangler.name_for(dep_id))
        rewritten += 1
    return rewritten


def binding_statement(mangler: IdMangler) -> asttypes.Node:
    """``var _a = "a", _b = "b";`` for every id the mangler has named."""
    declarations = ", ".join(f"{name} = {json.dumps(module_id)}" for module_id, name in mangler.items())
    return parse_source(f"var {declarations};", "<bindings>").children()[0]


def call_statement(function_name: str, arguments: Iterable[str]) -> asttypes.Node:
    """``name([a, b]);`` where *arguments* are identifier names."""
    return parse_source(f"{function_name}([{', '.join(arguments)}]);", "<generated>").children()[0]
