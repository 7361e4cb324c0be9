"""
Unit tests for the bundle transform passes: id mangling, dead code
elimination and ASCII-only output.
"""

import pytest

from amdlc.frontend.parser import parse_source, print_source
from amdlc.passes.ascii_only import to_ascii
from amdlc.passes.dead_code import eliminate_dead_code
from amdlc.passes.id_mangling import IdMangler, binding_statement, call_statement, rewrite_define_ids


def _print_statements(statements):
    tree = parse_source("")
    tree.children()[:] = statements
    return print_source(tree)


class TestIdMangler:
    """Injective id → identifier mapping"""

    def test_names_are_sanitized(self):
        mangler = IdMangler()
        assert mangler.name_for("app.ui.Button") == "_app_ui_Button"
        assert mangler.name_for("app/ui-kit/Panel") == "_app_ui_kit_Panel"

    def test_same_id_same_name(self):
        mangler = IdMangler()
        assert mangler.name_for("a.b") == mangler.name_for("a.b")
        assert len(mangler) == 1

    def test_collisions_get_suffixes(self):
        mangler = IdMangler()
        names = [mangler.name_for(i) for i in ("a.b", "a/b", "a-b")]
        assert names == ["_a_b", "_a_b_2", "_a_b_3"]
        assert len(set(names)) == 3

    def test_items_in_first_seen_order(self):
        mangler = IdMangler()
        for module_id in ("z", "a", "z", "m"):
            mangler.name_for(module_id)
        assert mangler.items() == [("z", "_z"), ("a", "_a"), ("m", "_m")]
        assert "a" in mangler
        assert "q" not in mangler


class TestRewriteDefineIds:
    """In-place define() rewrite"""

    def test_id_and_deps_become_identifiers(self):
        tree = parse_source("define('b', ['a', 'x.y'], function(a, y) { return a; });")
        mangler = IdMangler()

        assert rewrite_define_ids(tree, mangler) == 1
        text = print_source(tree)
        assert "define(_b, [_a, _x_y]" in text
        assert "'a'" not in text
        assert mangler.items() == [("b", "_b"), ("a", "_a"), ("x.y", "_x_y")]

    def test_two_argument_form(self):
        tree = parse_source("define('solo', function() { return 1; });")
        mangler = IdMangler()
        rewrite_define_ids(tree, mangler)
        assert "define(_solo, function()" in print_source(tree)

    def test_anonymous_define_untouched(self):
        tree = parse_source("define(['a'], function(a) {});")
        mangler = IdMangler()
        assert rewrite_define_ids(tree, mangler) == 0
        assert len(mangler) == 0

    def test_shared_ids_across_calls(self):
        tree = parse_source("define('a', [], function() {}); define('b', ['a'], function(a) {});")
        mangler = IdMangler()
        assert rewrite_define_ids(tree, mangler) == 2
        assert "'" not in print_source(tree)
        assert mangler.items() == [("a", "_a"), ("b", "_b")]

    def test_binding_statement(self):
        mangler = IdMangler()
        mangler.name_for("a")
        mangler.name_for("app.B")
        text = _print_statements([binding_statement(mangler)])
        assert "_a = \"a\"" in text
        assert "_app_B = \"app.B\"" in text

    def test_call_statement(self):
        statement = call_statement("expose", ["_a", "_b"])
        text = _print_statements([statement])
        assert text.strip() == "expose([_a, _b]);"


class TestDeadCode:
    """Constant branch folding and unreachable statement removal"""

    def _eliminate(self, source: str) -> str:
        tree = parse_source(source)
        eliminate_dead_code(tree)
        return print_source(tree)

    def test_if_true_keeps_consequent(self):
        text = self._eliminate("if (true) { kept(); } else { dropped(); }")
        assert "kept()" in text
        assert "dropped()" not in text
        assert "if" not in text

    def test_if_false_keeps_alternative(self):
        text = self._eliminate("if (false) { dropped(); } else { kept(); }")
        assert "kept()" in text
        assert "dropped()" not in text

    def test_if_false_without_else(self):
        text = self._eliminate("before(); if (false) { dropped(); } after();")
        assert "dropped()" not in text
        assert "before()" in text and "after()" in text

    def test_statements_after_return(self):
        text = self._eliminate("function f() { return 1; unreachable(); }")
        assert "return 1" in text
        assert "unreachable()" not in text

    def test_hoisted_declarations_survive(self):
        text = self._eliminate("function f() { return g(); var x; function g() { return 2; } gone(); }")
        assert "function g()" in text
        assert "var x" in text
        assert "gone()" not in text

    def test_branch_with_declaration_is_kept(self):
        text = self._eliminate("if (false) { var hoisted = 1; }")
        assert "hoisted" in text

    def test_after_throw_in_nested_block(self):
        text = self._eliminate("function f() { if (x) { throw 'e'; lost(); } ok(); }")
        assert "lost()" not in text
        assert "ok()" in text

    def test_returns_removed_count(self):
        tree = parse_source("function f() { return; a(); b(); }")
        assert eliminate_dead_code(tree) == 2

    def test_untouched_tree(self):
        tree = parse_source("var a = 1; a++;")
        assert eliminate_dead_code(tree) == 0


class TestAsciiOnly:
    """Non-ASCII escaping"""

    def test_ascii_unchanged(self):
        assert to_ascii("var a = 'plain';") == "var a = 'plain';"

    def test_bmp_character(self):
        assert to_ascii("'é'") == "'\\u00e9'"

    def test_astral_character_uses_surrogate_pair(self):
        assert to_ascii("\U0001F600") == "\\ud83d\\ude00"

    def test_control_characters_are_escaped(self):
        assert to_ascii("a='\x01\x7f'") == "a='\\u0001\\u007f'"
        assert to_ascii("\r") == "\\u000d"

    def test_newline_and_tab_kept(self):
        assert to_ascii("a;\n\tb;") == "a;\n\tb;"


if __name__ == "__main__":
    pytest.main([__file__])
