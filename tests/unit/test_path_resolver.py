"""
Unit tests for PathResolver

Module id → file path mapping with root namespace stripping, library
namespaces and per-id overrides.
"""

import pytest
from amdlc.analysis.module_system import LibraryMapping, PathResolver, in_namespace, strip_namespace


class TestNamespaceHelpers:
    """Segment-aware namespace matching"""

    def test_in_namespace(self):
        assert in_namespace("app.ui.Button", "app")
        assert in_namespace("app/ui/Button", "app")
        assert in_namespace("app", "app")
        assert not in_namespace("application.Main", "app")
        assert not in_namespace("app.Main", "")

    def test_strip_namespace(self):
        assert strip_namespace("app.ui.Button", "app") == "ui.Button"
        assert strip_namespace("app/ui/Button", "app") == "ui/Button"
        assert strip_namespace("other.Thing", "app") == "other.Thing"
        assert strip_namespace("app", "app") == "app"
        assert strip_namespace("app.Main", None) == "app.Main"


class TestPathResolver:
    """Test resolve() and should_load()"""

    def test_resolve_against_base_dir(self):
        resolver = PathResolver(base_dir="src")
        assert resolver.resolve("app.ui.Button") == "src/app/ui/Button.js"
        assert resolver.resolve("app/ui/Button") == "src/app/ui/Button.js"

    def test_resolve_strips_root_namespace(self):
        resolver = PathResolver(base_dir="src", root_ns="app")
        assert resolver.resolve("app.ui.Button") == "src/ui/Button.js"

    def test_resolve_normalizes_separators(self):
        resolver = PathResolver(base_dir="src\\js/../lib/")
        assert resolver.resolve("app.Main") == "src/lib/app/Main.js"

    def test_resolve_library_namespace(self):
        resolver = PathResolver(
            base_dir="src",
            root_ns="app",
            libs={"moxie": LibraryMapping(base_dir="lib/moxie/src", root_ns="moxie")},
        )
        assert resolver.resolve("moxie.file.FileInput") == "lib/moxie/src/file/FileInput.js"
        assert resolver.resolve("moxie/file/FileInput") == "lib/moxie/src/file/FileInput.js"

    def test_library_without_root_ns_keeps_prefix(self):
        resolver = PathResolver(base_dir="src", libs={"moxie": LibraryMapping(base_dir="lib")})
        assert resolver.resolve("moxie.core.Utils") == "lib/moxie/core/Utils.js"

    def test_longest_library_name_wins(self):
        resolver = PathResolver(libs={
            "ext": LibraryMapping(base_dir="ext", root_ns="ext"),
            "ext.ui": LibraryMapping(base_dir="ext-ui", root_ns="ext.ui"),
        })
        assert resolver.resolve("ext.ui.Panel") == "ext-ui/Panel.js"
        assert resolver.resolve("ext.core.Dom") == "ext/core/Dom.js"

    def test_override_is_used_verbatim(self):
        resolver = PathResolver(base_dir="src", root_ns="app", overrides={"app.Config": "config\\dev.js"})
        assert resolver.resolve("app.Config") == "config/dev.js"

    def test_resolve_is_idempotent(self):
        resolver = PathResolver(base_dir="src", root_ns="app")
        assert resolver.resolve("app.util.Tools") == resolver.resolve("app.util.Tools")

    def test_should_load_without_root_namespace(self):
        resolver = PathResolver(base_dir="src")
        assert resolver.should_load("anything.At.All")

    def test_should_load_with_root_namespace(self):
        resolver = PathResolver(
            base_dir="src",
            root_ns="app",
            libs={"moxie": LibraryMapping(base_dir="lib")},
        )
        assert resolver.should_load("app.ui.Button")
        assert resolver.should_load("moxie.file.FileInput")
        assert not resolver.should_load("jquery.Core")
        assert not resolver.should_load("application.Main")

    def test_is_library_module(self):
        resolver = PathResolver(libs={"moxie": LibraryMapping(base_dir="lib")})
        assert resolver.is_library_module("moxie.xhr.XMLHttpRequest")
        assert not resolver.is_library_module("app.Main")


if __name__ == "__main__":
    pytest.main([__file__])
