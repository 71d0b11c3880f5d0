"""
Glob-driven bulk file inclusion

Expands one {glob, prefix} manifest block into (bundle key, filesystem path)
pairs. Pairs are yielded one at a time as matches are found so the caller
can hand each to the bundle builder before the next is examined.
"""

import glob
import os
import stat
from typing import Iterator, Tuple

from .errors import FilesystemError
from .log import LOG


def key_derive(match: str, key_prefix: str, root_prefix: str) -> str:
    """
    Compute the bundle key for a glob match

    Strips a leading root prefix and any separators following it, then
    prepends the key prefix. A match that does not extend past the root
    prefix is used whole.

    Example:
        >>> key_derive("assets/a.png", "icons/", "assets")
        'icons/a.png'
        >>> key_derive("/elsewhere/a.png", "icons/", "assets")
        'icons//elsewhere/a.png'
    """
    relative = match
    if len(match) > len(root_prefix) and match.startswith(root_prefix):
        relative = match[len(root_prefix):].lstrip(os.sep)
    return f"{key_prefix}{relative}"


def glob_expand(pattern: str, key_prefix: str, root_prefix: str) -> Iterator[Tuple[str, str]]:
    """
    Enumerate regular files matching a resolved glob pattern

    Matches come back in filesystem order (not sorted). Directories are
    skipped silently.

    Args:
        pattern: Glob pattern, already resolved against root_prefix
        key_prefix: String prepended to every derived key
        root_prefix: Root prefix stripped from matches to form keys

    Yields:
        (key, path) for each matching non-directory

    Raises:
        FilesystemError: "no patterns matched" when nothing matches,
            "read error while globbing" when enumeration fails,
            "out of memory" on allocation failure, or
            "unable to stat <path>" when a match cannot be stat'ed
    """
    LOG(f"Globbing {pattern}", level=2)
    matched = 0
    matches = glob.iglob(pattern)

    while True:
        try:
            path = next(matches)
        except StopIteration:
            break
        except MemoryError as e:
            raise FilesystemError("out of memory", path=pattern) from e
        except (OSError, ValueError) as e:
            raise FilesystemError("read error while globbing", path=pattern) from e

        matched += 1
        try:
            mode = os.stat(path).st_mode
        except (OSError, ValueError) as e:
            raise FilesystemError(f"unable to stat {path}", path=path) from e

        if stat.S_ISDIR(mode):
            LOG(f"Skipping directory {path}", level=3)
            continue

        yield key_derive(path, key_prefix, root_prefix), path

    if not matched:
        raise FilesystemError("no patterns matched", path=pattern)
