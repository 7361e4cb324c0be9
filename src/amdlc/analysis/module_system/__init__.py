"""Module system: path resolution, exposure rules, module graph discovery."""

from .path_resolver import PathResolver, in_namespace, strip_namespace
from .module_info import Module, InlineSource, LibraryMapping
from .exposure import ExposurePolicy
from .module_loader import ModuleGraphBuilder, substitute_tokens

__all__ = [
    'PathResolver',
    'in_namespace',
    'strip_namespace',
    'Module',
    'InlineSource',
    'LibraryMapping',
    'ExposurePolicy',
    'ModuleGraphBuilder',
    'substitute_tokens',
]
