"""
Dead Code Elimination

Prunes statements that can never run:

- ``if (true) A else B`` / ``if (false) A else B`` collapse to the taken branch
- statements after ``return``/``throw``/``break``/``continue`` in the same list

Function declarations and ``var`` statements are hoisted by the language and
are never dropped. Rewrites the tree in place.
"""

import logging

from calmjs.parse import asttypes

from ..frontend.parser import iter_nodes, statement_lists

logger = logging.getLogger(__name__)

_TERMINATORS = (asttypes.Return, asttypes.Throw, asttypes.Break, asttypes.Continue)
_HOISTED = (asttypes.FuncDecl, asttypes.VarStatement)


def _declares_hoisted(node) -> bool:
    if node is None:
        return False
    return any(isinstance(child, _HOISTED) for child in iter_nodes(node))


def _branch_statements(branch) -> list:
    if branch is None:
        return []
    if isinstance(branch, asttypes.Block):
        return list(branch.children())
    return [branch]


def _fold_if(statement):
    """Statements replacing a constant if, or None when it must stay."""
    if not isinstance(statement, asttypes.If) or not isinstance(statement.predicate, asttypes.Boolean):
        return None
    taken, dropped = statement.consequent, statement.alternative
    if statement.predicate.value == "false":
        taken, dropped = dropped, taken
    if _declares_hoisted(dropped):
        return None
    return _branch_statements(taken)


def _prune(statements: list) -> int:
    result = []
    removed = 0
    terminated = False
    for statement in statements:
        if terminated:
            if isinstance(statement, _HOISTED):
                result.append(statement)
            else:
                removed += 1
            continue

        folded = _fold_if(statement)
        if folded is not None:
            removed += 1
            result.extend(folded)
            terminated = any(isinstance(s, _TERMINATORS) for s in folded)
            continue

        result.append(statement)
        if isinstance(statement, _TERMINATORS):
            terminated = True

    statements[:] = result
    return removed


def eliminate_dead_code(tree: asttypes.Node) -> int:
    """Prune *tree* in place; returns the number of statements removed or folded."""
    removed = 0
    # Innermost lists first so folded branches are already pruned when spliced
    for node in reversed(list(iter_nodes(tree))):
        for statements in statement_lists(node):
            removed += _prune(statements)
    if removed:
        logger.debug(f"Dead code elimination removed {removed} statements")
    return removed
