"""
Unit tests for the Reporter diagnostics sink and the build exceptions.
"""

import logging
import pytest
from amdlc.shared import (
    ArityMismatchWarning,
    MissingFileError,
    DeclarationEvaluationError,
    NoModulesDiscoveredError,
    Reporter,
    SourceLocation,
)


class TestReporter:
    """Leveled reporting and collection"""

    def test_debug_and_info_are_not_collected(self, reporter):
        reporter.debug("details")
        reporter.info("progress")
        assert reporter.diagnostics == []
        assert not reporter.has_errors()

    def test_warnings_are_not_errors(self, reporter):
        reporter.warning("careful")
        assert len(reporter.warnings) == 1
        assert not reporter.has_errors()
        assert not reporter.has_fatal()

    def test_error_is_not_fatal(self, reporter):
        reporter.error("bad")
        assert reporter.has_errors()
        assert not reporter.has_fatal()

    def test_report_exception_is_fatal(self, reporter):
        reporter.report_exception(MissingFileError("js/Missing.js", "js/Main.js", "app.Main"))
        assert reporter.has_fatal()
        diagnostic = reporter.errors[0]
        assert diagnostic.code == "E0001"
        assert diagnostic.message == "module file not found: js/Missing.js"
        assert diagnostic.note == "required by js/Main.js (module 'app.Main')"

    def test_report_warning(self, reporter):
        reporter.report_warning(ArityMismatchWarning("a.B", 2, 1, SourceLocation("a.js", 3, 1)))
        warning = reporter.warnings[0]
        assert warning.code == "W0001"
        assert "2 dependencies" in warning.message

    def test_messages_go_to_logger(self, reporter, caplog):
        with caplog.at_level(logging.DEBUG, logger="amdlc"):
            reporter.debug("debug line")
            reporter.fatal("fatal line")
        assert "debug line" in caplog.text
        assert "fatal line" in caplog.text


class TestFormatting:
    """Plain text rendering"""

    def test_format_with_source_line(self):
        reporter = Reporter({"js/a.js": "var a;\ndefine('a', [b], f);\n"})
        reporter.report_exception(DeclarationEvaluationError("js/a.js", "bad dependency", SourceLocation("js/a.js", 2, 13)))
        text = reporter.format_all(color=False)

        assert "error[E0002]: failed to evaluate module declaration in js/a.js: bad dependency" in text
        assert " --> js/a.js:2:13" in text
        assert "2 | define('a', [b], f);" in text
        assert "aborting due to 1 previous error" in text

    def test_format_warning(self, reporter):
        reporter.warning("unused", code="W0002")
        text = reporter.format(reporter.warnings[0], color=False)
        assert text == "warning[W0002]: unused"

    def test_note_rendering(self, reporter):
        reporter.report_exception(MissingFileError("js/B.js", "js/A.js"))
        text = reporter.format_all(color=False)
        assert "= note: required by js/A.js" in text


class TestExceptions:
    """Exception payloads"""

    def test_missing_file_without_referrer(self):
        error = MissingFileError("js/Main.js")
        assert error.location is None
        assert error.note is None
        assert str(error) == "module file not found: js/Main.js"

    def test_declaration_error_location_defaults_to_file(self):
        error = DeclarationEvaluationError("js/a.js", "boom")
        assert error.location == SourceLocation("js/a.js")
        assert str(error.location) == "js/a.js"

    def test_no_modules(self):
        error = NoModulesDiscoveredError(["js/*.js"])
        assert error.error_code == "E0003"
        assert "js/*.js" in error.message


if __name__ == "__main__":
    pytest.main([__file__])
