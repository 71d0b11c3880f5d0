"""
Diagnostic rendering for manifest errors

The one-line form ("line 3, col 5: message") is what every failure prints.
With an excerpt, the offending source line follows, optionally
syntax-highlighted, with a caret under the reported column:

    line 3, col 5: unknown top level property: textures2
      textures2: {}
      ^
"""

from pathlib import Path
from typing import Optional

from pygments import highlight
from pygments.formatters import TerminalFormatter

from .errors import ManifestError
from .lexer import ManifestLexer


def sourceLine_read(manifest_file: Path, line: int) -> Optional[str]:
    """
    Fetch one line of a manifest file for an excerpt

    Returns:
        The line without its newline, or None if the file or line is missing
    """
    try:
        with manifest_file.open(encoding="utf-8", errors="replace") as f:
            for number, text in enumerate(f, start=1):
                if number == line:
                    return text.rstrip("\r\n")
    except OSError:
        return None
    return None


def diagnostic_render(error: ManifestError, source_line: Optional[str] = None, color: bool = False) -> str:
    """
    Format an error for the error stream

    Args:
        error: The run's error
        source_line: Text of the line the error points at, if available
        color: Highlight the excerpt with Pygments terminal colors

    Returns:
        Diagnostic text, without a trailing newline
    """
    text = str(error)
    if source_line is None or error.column is None:
        return text

    # tabs would misalign the caret
    excerpt = source_line.expandtabs(1)
    if color:
        excerpt = highlight(excerpt, ManifestLexer(), TerminalFormatter()).rstrip("\n")
    caret = " " * (error.column - 1) + "^"
    return f"{text}\n  {excerpt}\n  {caret}"
