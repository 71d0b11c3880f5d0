"""
Manifest path resolution

Paths in a manifest are relative to a configured root prefix unless they
are absolute.
"""

import os

from .errors import ValueConstraint


def path_resolve(raw_path: str, root_prefix: str, path_max: int = 4096) -> str:
    """
    Resolve a manifest path against the root prefix

    Absolute paths are returned unchanged. Relative paths are joined to the
    root with exactly one separator. No filesystem access.

    Args:
        raw_path: Path as written in the manifest
        root_prefix: Directory relative paths are anchored to
        path_max: Longest resolved path accepted

    Returns:
        Resolved path string

    Raises:
        ValueConstraint: If the path contains a NUL character or the
            resolved path is longer than path_max

    Example:
        >>> path_resolve("x.png", "/assets")
        '/assets/x.png'
        >>> path_resolve("/tmp/x.png", "/assets")
        '/tmp/x.png'
    """
    if "\0" in raw_path or "\0" in root_prefix:
        raise ValueConstraint("path contains a NUL character")

    if raw_path.startswith(os.sep) or not root_prefix:
        resolved = raw_path
    else:
        # "assets/" and "assets" both join as "assets/x"; "/" stays "/x"
        root = root_prefix.rstrip(os.sep)
        resolved = f"{root}{os.sep}{raw_path}"

    if len(resolved) > path_max:
        raise ValueConstraint(
            f"resolved path exceeds {path_max} characters: {resolved[:64]}..."
        )
    return resolved
