"""
Pytest configuration and shared fixtures for all amdlc tests.

Provides a fresh Reporter per test and a factory that lays out module files
under pytest's tmp_path.
"""

import sys
import pytest
from typing import Dict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
sys.path.insert(0, str(Path(__file__).parent.parent))
from amdlc.compiler.options import BuildOptions
from amdlc.shared.errors import Reporter
from tests.test_utils import define_source


# =============================================================================
# Function-scoped fixtures (default - one per test)
# =============================================================================

@pytest.fixture
def reporter():
    """Fresh diagnostics sink."""
    return Reporter()


@pytest.fixture
def make_project(tmp_path):
    """
    Factory fixture writing ``{relative path: source}`` under tmp_path.

    Returns the project root as a forward-slash string.
    """
    def _make_project(files: Dict[str, str]) -> str:
        for relative, source in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(source, encoding="utf-8")
        return tmp_path.as_posix()

    return _make_project


@pytest.fixture
def app_project(make_project):
    """
    Small project: app.Main depends on app.ui.Button and app.util.Tools,
    Button depends on Tools as well.
    """
    return make_project({
        "js/app/Main.js": define_source("app.Main", ["app.ui.Button", "app.util.Tools"]),
        "js/app/ui/Button.js": define_source("app.ui.Button", ["app.util.Tools"]),
        "js/app/util/Tools.js": define_source("app.util.Tools"),
    })


@pytest.fixture
def app_options(app_project):
    """BuildOptions for app_project with every output target configured."""
    return BuildOptions.from_dict({
        "from": f"{app_project}/js/app/Main.js",
        "baseDir": f"{app_project}/js",
        "outputSource": f"{app_project}/build/app.js",
        "outputMinified": f"{app_project}/build/app.min.js",
        "outputDev": f"{app_project}/build/app.dev.js",
    })


# =============================================================================
# Test organization markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
