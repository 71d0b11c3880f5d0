"""
Interpreter run models

Configuration handed to a manifest run and the result it returns.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..lib.errors import ManifestError


class Outcome(Enum):
    """
    What ManifestSession.feed() did with an event

    ACCEPTED: the event was valid and its effect applied
    FAILED: the event caused the run's (first) error
    DRAINED: the session had already failed; the event was ignored
    """
    ACCEPTED = "accepted"
    FAILED = "failed"
    DRAINED = "drained"


@dataclass
class RunConfig:
    """
    Settings for one manifest run

    Attributes:
        root_prefix: Directory relative manifest paths resolve against
        chunk_size: Bytes read from the manifest stream at a time
        path_max: Longest resolved path accepted
        max_value_size: Longest scalar the tokenizer accepts
        max_depth: Deepest nesting the tokenizer accepts
    """
    root_prefix: str = "."
    chunk_size: int = 16384
    path_max: int = 4096
    max_value_size: int = 16384
    max_depth: int = 64

    @classmethod
    def config_createFromSettings(cls, settings: Any = None, **overrides: Any) -> "RunConfig":
        """
        Build a RunConfig from AppSettings, letting explicit values win

        Args:
            settings: AppSettings instance (defaults to the appsettings singleton)
            **overrides: Field values to use instead of the settings'; None
                         values are ignored

        Example:
            >>> RunConfig.config_createFromSettings(root_prefix="assets").root_prefix
            'assets'
        """
        if settings is None:
            from ..config import appsettings
            settings = appsettings

        values = {
            "root_prefix": settings.root_prefix,
            "chunk_size": settings.read_chunk_size,
            "path_max": settings.path_max,
            "max_value_size": settings.max_value_size,
            "max_depth": settings.max_depth,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


@dataclass
class RunResult:
    """
    Result of interpreting one manifest

    Attributes:
        error: The first error of the run, or None on success
        pages_added: Number of page_add() calls that succeeded
        files_added: Number of file_add() calls that succeeded
    """
    error: Optional["ManifestError"] = field(default=None)
    pages_added: int = 0
    files_added: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def line(self) -> Optional[int]:
        return self.error.line if self.error else None

    @property
    def column(self) -> Optional[int]:
        return self.error.column if self.error else None

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None
