"""Shared types: source locations, diagnostics and build errors."""

from .source_location import SourceLocation
from .errors import (
    Diagnostic,
    Reporter,
    BundleError,
    MissingFileError,
    DeclarationEvaluationError,
    NoModulesDiscoveredError,
    ConfigurationError,
    TemplateError,
    BundleWarning,
    ArityMismatchWarning,
    AnonymousModuleWarning,
    DuplicateModuleIdWarning,
)

__all__ = [
    'SourceLocation',
    'Diagnostic',
    'Reporter',
    'BundleError',
    'MissingFileError',
    'DeclarationEvaluationError',
    'NoModulesDiscoveredError',
    'ConfigurationError',
    'TemplateError',
    'BundleWarning',
    'ArityMismatchWarning',
    'AnonymousModuleWarning',
    'DuplicateModuleIdWarning',
]
