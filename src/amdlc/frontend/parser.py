"""
Parser

Wraps calmjs.parse (ES5 parser and printers) and recognises module
declarations structurally: ``define(id, deps, factory)`` calls are read from
the syntax tree, never executed.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from calmjs.parse import es5
from calmjs.parse import asttypes
from calmjs.parse.exceptions import ECMASyntaxError
from calmjs.parse.unparsers.es5 import minify_print, pretty_print

from ..shared.source_location import SourceLocation
from ..utils.config import DEFINE_FUNCTION_NAME

logger = logging.getLogger("amdlc.frontend.parser")

_SIMPLE_ESCAPES = {
    "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v", "0": "\0",
}
_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_LINE_COL_RE = re.compile(r"line (\d+):(\d+)")


class ParseError(Exception):
    """Parse error with source location"""
    def __init__(self, message: str, source_file: str, location: Optional[SourceLocation] = None):
        self.message = message
        self.source_file = source_file
        self.location = location
        super().__init__(f"{message} in {source_file}")


@dataclass
class DefineCall:
    """
    A ``define(...)`` call found in a syntax tree.

    id is None for anonymous definitions; factory_params is None when the
    factory is not an inline function expression (arity cannot be checked).
    """
    id: Optional[str]
    deps: Tuple[str, ...]
    factory_params: Optional[int]
    node: asttypes.FunctionCall
    location: Optional[SourceLocation] = None


def parse_source(source: str, source_file: str = "<source>") -> asttypes.Program:
    """
    Parse ES5 source text into a calmjs syntax tree.

    Every call returns a fresh tree, so callers may rewrite it in place.
    """
    try:
        return es5(source)
    except ECMASyntaxError as e:
        match = _LINE_COL_RE.search(str(e))
        location = None
        if match:
            location = SourceLocation(source_file, int(match.group(1)), int(match.group(2)))
        raise ParseError(f"Parse error: {e}", source_file, location) from e


def print_source(tree: asttypes.Node) -> str:
    """Beautified source text of *tree*."""
    return pretty_print(tree)


def print_minified(tree: asttypes.Node, obfuscate: bool = True) -> str:
    """Minified source text; obfuscate shortens local identifiers (globals untouched)."""
    return minify_print(tree, obfuscate=obfuscate, obfuscate_globals=False)


def iter_nodes(node: asttypes.Node) -> Iterator[asttypes.Node]:
    """Depth-first pre-order walk over *node* and all its descendants."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        children = [child for child in current.children() if isinstance(child, asttypes.Node)]
        stack.extend(reversed(children))


def statement_lists(node: asttypes.Node) -> List[list]:
    """
    The live statement lists owned by *node* (program, block or function
    body, switch clause). Mutating a returned list rewrites the tree.
    """
    lists = []
    if isinstance(node, (asttypes.Program, asttypes.Block)):
        lists.append(node.children())
    elements = getattr(node, "elements", None)
    if isinstance(elements, list):
        lists.append(elements)
    return lists


def is_call_to(node: asttypes.Node, name: str) -> bool:
    """True for a call expression ``name(...)`` on a plain identifier."""
    return (
        isinstance(node, asttypes.FunctionCall)
        and isinstance(node.identifier, asttypes.Identifier)
        and node.identifier.value == name
    )


def call_arguments(call: asttypes.FunctionCall) -> List[asttypes.Node]:
    args = call.args
    if isinstance(args, asttypes.Arguments):
        return list(args.items or [])
    return list(args or [])


def string_value(node: asttypes.Node) -> Optional[str]:
    """Decoded value of a string literal node, None for anything else."""
    if not isinstance(node, asttypes.String):
        return None
    raw = node.value
    return decode_string_literal(raw[1:-1])


def decode_string_literal(body: str) -> str:
    """Apply JavaScript escape rules to the text between a literal's quotes."""
    def replace(match: "re.Match") -> str:
        seq = match.group(1)
        if seq.startswith("u{"):
            return chr(int(seq[2:-1], 16))
        if seq[0] == "u" and len(seq) == 5:
            return chr(int(seq[1:], 16))
        if seq[0] == "x" and len(seq) == 3:
            return chr(int(seq[1:], 16))
        if seq in ("\n", "\r", "\r\n", "\u2028", "\u2029"):
            return ""
        return _SIMPLE_ESCAPES.get(seq, seq)

    # Surrogate pairs written as two \u escapes are joined afterwards
    decoded = _ESCAPE_RE.sub(replace, body)
    try:
        return decoded.encode("utf-16", "surrogatepass").decode("utf-16")
    except UnicodeDecodeError:
        return decoded


def node_location(node: asttypes.Node, source_file: str) -> SourceLocation:
    return SourceLocation(source_file, getattr(node, "lineno", None) or 0, getattr(node, "colno", None) or 0)


def find_define_calls(tree: asttypes.Node, source_file: str = "<source>") -> List[DefineCall]:
    """
    Find every ``define(...)`` call in *tree*, in source order.

    Recognised forms: ``define(id, deps, factory)`` and ``define(id, factory)``.
    Raises ValueError when a dependency list entry is not a string literal.
    """
    calls: List[DefineCall] = []
    for node in iter_nodes(tree):
        if not is_call_to(node, DEFINE_FUNCTION_NAME):
            continue

        args = call_arguments(node)
        module_id = string_value(args[0]) if args else None
        deps: Tuple[str, ...] = ()
        factory = args[-1] if args else None

        dep_list = None
        if len(args) >= 3:
            dep_list = args[1]
        elif len(args) == 2 and isinstance(args[0], asttypes.Array):
            dep_list = args[0]

        if dep_list is not None:
            if not isinstance(dep_list, asttypes.Array):
                raise ValueError("dependency list of define() must be an array literal")
            values = []
            for item in dep_list.items:
                value = string_value(item)
                if value is None:
                    raise ValueError("dependency ids of define() must be string literals")
                values.append(value)
            deps = tuple(values)

        factory_params = None
        if isinstance(factory, (asttypes.FuncExpr, asttypes.FuncDecl)):
            factory_params = len(factory.parameters)

        calls.append(DefineCall(
            id=module_id,
            deps=deps,
            factory_params=factory_params,
            node=node,
            location=node_location(node, source_file),
        ))
    return calls
