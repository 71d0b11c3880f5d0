"""
Manifest error taxonomy

Every failure the interpreter can report is a ManifestError carrying the
source position it applies to. The string form is the diagnostic line the
command line prints:

    line 3, col 5: unknown top level property: textures2
"""

from typing import Optional


class ManifestError(Exception):
    """
    Base class for all interpretation failures

    Attributes:
        message: Human-readable description without position
        line: 1-based source line, or None when no position applies
        column: 1-based source column, or None when no position applies
    """

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column

    def position_set(self, line: int, column: int) -> "ManifestError":
        """Annotate with a source position unless one is already present"""
        if self.line is None:
            self.line = line
            self.column = column
        return self

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"line {self.line}, col {self.column}: {self.message}"


class GrammarViolation(ManifestError):
    """Wrong event kind or shape at the current grammar position"""


class UnknownKey(ManifestError):
    """A recognized container received a property name outside its allowed set"""


class ValueConstraint(ManifestError):
    """A scalar failed a semantic check (non-integral size, missing field, ...)"""


class FilesystemError(ManifestError):
    """Glob enumeration or stat failure"""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class CollaboratorError(ManifestError):
    """The bundle builder rejected a commit"""


class TokenizeError(ManifestError):
    """The manifest text is not well-formed"""
