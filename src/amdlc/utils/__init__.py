"""
amdlc utilities package
"""

from .io_utils import read_source_file, write_output_file, to_unix_path, relative_unix_path, SourceCache

__all__ = ["read_source_file", "write_output_file", "to_unix_path", "relative_unix_path", "SourceCache"]
