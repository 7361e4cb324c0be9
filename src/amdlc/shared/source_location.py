"""
Source Location

Points a diagnostic at a position inside a module source file.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    File, line and column of a construct (1-based line and column).

    Immutable (frozen) so it can be shared between diagnostics and module records.
    """
    file: str
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        """Format as file:line:column"""
        if self.line:
            return f"{self.file}:{self.line}:{self.column}"
        return self.file
