"""
Command line interface tests (`amdlc [options] <input> <output>`).
"""

import json
from pathlib import Path

import pytest
from amdlc.__main__ import main
from tests.test_utils import define_source

pytestmark = pytest.mark.integration


class TestCli:
    """Argument handling and exit status"""

    def test_build_derives_outputs(self, app_project):
        output = f"{app_project}/build/app.js"
        status = main([f"{app_project}/js/app/Main.js", output, "--basedir", f"{app_project}/js", "--quiet"])

        assert status == 0
        assert Path(output).is_file()
        assert Path(f"{app_project}/build/app.min.js").is_file()
        assert Path(f"{app_project}/build/app.dev.js").is_file()

    def test_expose_list_and_version(self, app_project):
        output = f"{app_project}/build/app.js"
        status = main([
            f"{app_project}/js/app/Main.js", output,
            "--basedir", f"{app_project}/js",
            "--expose", "app.Main,app.ui.Button",
            "--version-string", "2.0.1",
            "--release-date", "2024-02-29",
            "--quiet",
        ])

        assert status == 0
        source = Path(output).read_text(encoding="utf-8")
        assert 'expose(["app.ui.Button","app.Main"]);' in source
        minified = Path(f"{app_project}/build/app.min.js").read_text(encoding="utf-8")
        assert minified.startswith("// 2.0.1 (2024-02-29)\n")

    def test_default_exposure_is_public(self, make_project):
        """Modules documented as private stay hidden unless --expose says otherwise"""
        root = make_project({
            "js/app/Main.js": define_source("app.Main", ["app.Hidden"]),
            "js/app/Hidden.js": "/**\n * @private\n * @class app.Hidden\n */\n" + define_source("app.Hidden"),
        })
        output = f"{root}/build/app.js"
        main([f"{root}/js/app/Main.js", output, "--basedir", f"{root}/js", "--quiet"])
        assert 'expose(["app.Main"]);' in Path(output).read_text(encoding="utf-8")

        main([f"{root}/js/app/Main.js", output, "--basedir", f"{root}/js", "--expose", "all", "--force", "--quiet"])
        assert 'expose(["app.Hidden","app.Main"]);' in Path(output).read_text(encoding="utf-8")

    def test_no_compress(self, app_project):
        main([
            f"{app_project}/js/app/Main.js", f"{app_project}/build/app.js",
            "--basedir", f"{app_project}/js", "--no-compress", "--quiet",
        ])
        minified = Path(f"{app_project}/build/app.min.js").read_text(encoding="utf-8")
        assert '_app_Main = "app.Main"' in minified

    def test_config_file(self, app_project):
        config = Path(app_project) / "build.json"
        config.write_text(json.dumps({"globalModules": {"app.Main": "App"}}), encoding="utf-8")
        status = main([
            f"{app_project}/js/app/Main.js", f"{app_project}/build/app.js",
            "--basedir", f"{app_project}/js", "--config", str(config), "--quiet",
        ])

        assert status == 0
        source = Path(f"{app_project}/build/app.js").read_text(encoding="utf-8")
        assert 'exports.App = modules["app.Main"];' in source

    def test_missing_file_exit_status(self, make_project, capsys):
        root = make_project({"js/Main.js": "define('Main', ['Gone'], function(g) {});"})
        status = main([f"{root}/js/Main.js", f"{root}/build/app.js", "--basedir", f"{root}/js", "--quiet"])

        assert status == 1
        assert "E0001" in capsys.readouterr().err

    def test_basedir_is_required(self, app_project):
        with pytest.raises(SystemExit) as exc_info:
            main([f"{app_project}/js/app/Main.js", f"{app_project}/build/app.js"])
        assert exc_info.value.code == 2


if __name__ == "__main__":
    pytest.main([__file__])
