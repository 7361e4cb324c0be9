"""
Error Reporting

Diagnostics sink shared by every build component, plus the exception
hierarchy components raise when a build has to stop.
"""

import logging
import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

from .source_location import SourceLocation

logger = logging.getLogger("amdlc")


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get("AMDLC_COLOR", "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_YELLOW = "\033[33m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Diagnostic dataclass
# ---------------------------------------------------------------------------

SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"
SEVERITY_FATAL = "fatal"


@dataclass
class Diagnostic:
    """A reported warning, error or fatal condition."""
    message: str
    severity: str = SEVERITY_ERROR
    location: Optional[SourceLocation] = None
    code: Optional[str] = None
    note: Optional[str] = None


def _format_diagnostic(
    diagnostic: Diagnostic,
    source_files: Dict[str, str],
    color: bool = False,
) -> str:
    """
    Render a single diagnostic.

    Example output (plain, no color)::

        error[E0001]: module file not found: src/app/Missing.js
         --> src/app/Main.js
          = note: required by module 'app.Main'
    """
    is_warning = diagnostic.severity == SEVERITY_WARNING
    head_color = _YELLOW if is_warning else _RED
    head = "warning" if is_warning else "error"
    code_str = f"[{diagnostic.code}]" if diagnostic.code else ""
    out: List[str] = [
        _style(f"{head}{code_str}", _BOLD, head_color, color=color)
        + _style(f": {diagnostic.message}", _BOLD, color=color)
    ]

    loc = diagnostic.location
    if loc is not None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + str(loc))
        source = source_files.get(loc.file)
        if source is not None and loc.line:
            src_lines = source.split("\n")
            if 0 < loc.line <= len(src_lines):
                gutter = str(loc.line)
                pad = " " * len(gutter)
                out.append(_style(f"{pad} |", _BOLD, _BLUE, color=color))
                out.append(_style(f"{gutter} | ", _BOLD, _BLUE, color=color) + src_lines[loc.line - 1])
                caret = " " * max(loc.column - 1, 0) + "^"
                out.append(_style(f"{pad} | ", _BOLD, _BLUE, color=color) + _style(caret, _BOLD, head_color, color=color))

    if diagnostic.note:
        out.append(_style("  = ", _BOLD, _BLUE, color=color) + _style("note: ", _BOLD, color=color) + diagnostic.note)
    return "\n".join(out)


# ---------------------------------------------------------------------------
# Reporter
# ---------------------------------------------------------------------------

class Reporter:
    """
    Leveled diagnostics sink (debug/info/warning/error/fatal).

    debug and info only go to the ``amdlc`` logger. Warnings, errors and
    fatal conditions are logged and also collected so callers can check
    ``has_fatal()`` after a build; the absence of a fatal report is the
    only trustworthy success signal.
    """

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files: Dict[str, str] = source_files if source_files is not None else {}
        self.diagnostics: List[Diagnostic] = []

    def debug(self, message: str) -> None:
        logger.debug(message)

    def info(self, message: str) -> None:
        logger.info(message)

    def warning(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        self._collect(Diagnostic(message, SEVERITY_WARNING, location, code, note))
        logger.warning(message)

    def error(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        self._collect(Diagnostic(message, SEVERITY_ERROR, location, code, note))
        logger.error(message)

    def fatal(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        code: Optional[str] = None,
        note: Optional[str] = None,
    ) -> None:
        self._collect(Diagnostic(message, SEVERITY_FATAL, location, code, note))
        logger.critical(message)

    def report_exception(self, error: "BundleError") -> None:
        """Report a raised BundleError as a fatal diagnostic."""
        self.fatal(error.message, error.location, error.error_code, error.note)

    def report_warning(self, warning: "BundleWarning") -> None:
        self.warning(str(warning), warning.location, warning.code)

    def _collect(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == SEVERITY_WARNING]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity != SEVERITY_WARNING]

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def has_fatal(self) -> bool:
        return any(d.severity == SEVERITY_FATAL for d in self.diagnostics)

    def format(self, diagnostic: Diagnostic, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(diagnostic, self.source_files, color=use_color)

    def format_all(self, color: Optional[bool] = None) -> str:
        parts = [self.format(d, color=color) for d in self.diagnostics]
        count = len(self.errors)
        if count:
            use_color = color if color is not None else _use_color()
            summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
            parts.append(
                _style("error", _BOLD, _RED, color=use_color)
                + _style(f": {summary}", _BOLD, color=use_color)
            )
        return "\n\n".join(parts)

    def print_diagnostics(self) -> None:
        text = self.format_all()
        if text:
            print(text, file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

class BundleError(Exception):
    """Base exception for conditions that abort a build"""
    error_code = "E0000"

    def __init__(self, message: str, location: Optional[SourceLocation] = None, note: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.location = location
        self.note = note

    def __str__(self):
        if self.location:
            return f"error[{self.error_code}]: {self.message}\n --> {self.location}"
        return self.message


class MissingFileError(BundleError):
    """An entry or dependency path does not exist on disk or in memory."""
    error_code = "E0001"

    def __init__(self, path: str, referrer: Optional[str] = None, module_id: Optional[str] = None):
        if referrer:
            note = f"required by {referrer}" + (f" (module '{module_id}')" if module_id else "")
        else:
            note = None
        super().__init__(
            f"module file not found: {path}",
            SourceLocation(referrer) if referrer else None,
            note,
        )
        self.path = path
        self.referrer = referrer


class DeclarationEvaluationError(BundleError):
    """Reading a module's define() declaration failed."""
    error_code = "E0002"

    def __init__(self, path: str, reason: str, location: Optional[SourceLocation] = None):
        super().__init__(
            f"failed to evaluate module declaration in {path}: {reason}",
            location or SourceLocation(path),
        )
        self.path = path
        self.reason = reason


class NoModulesDiscoveredError(BundleError):
    """The entry patterns produced no module definitions at all."""
    error_code = "E0003"

    def __init__(self, patterns):
        super().__init__(f"no input files found for {patterns!r}")
        self.patterns = patterns


class ConfigurationError(BundleError):
    """Invalid build options."""
    error_code = "E0004"


class TemplateError(BundleError):
    """A loader template lacks its substitution point."""
    error_code = "E0005"


# ============================================================================
# Non-fatal conditions
# ============================================================================

class BundleWarning(UserWarning):
    """Reported through the Reporter; never raised by the build."""
    code = "W0000"

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.location = location


class ArityMismatchWarning(BundleWarning):
    """A factory's parameter count differs from its dependency count."""
    code = "W0001"

    def __init__(self, module_id: str, dep_count: int, param_count: int, location: Optional[SourceLocation] = None):
        super().__init__(
            f"module '{module_id}' declares {dep_count} dependencies "
            f"but its factory takes {param_count} parameters",
            location,
        )
        self.module_id = module_id
        self.dep_count = dep_count
        self.param_count = param_count


class AnonymousModuleWarning(BundleWarning):
    """define() called without a literal string id."""
    code = "W0002"


class DuplicateModuleIdWarning(BundleWarning):
    """Two different files define the same module id."""
    code = "W0003"
