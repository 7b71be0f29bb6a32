"""
Name sharding shared by the index, the cache-adjacent layout and the mirror.

Cargo's registry nests package directories by name length and prefix so no
single directory grows too large. Every path and URL in this package is built
from shard_segments(); nothing else branches on name length.
"""
from __future__ import annotations

from typing import Tuple

__all__ = ["shard_segments", "shard_path"]


def shard_segments(name: str) -> Tuple[str, ...]:
    """
    Return the relative path segments for a package name.

    Args:
        name: Package name (non-empty, used verbatim)

    Returns:
        Tuple of segments ending with the name itself

    Raises:
        ValueError: If name is empty

    Examples:
        >>> shard_segments("a")
        ('1', 'a')
        >>> shard_segments("abc")
        ('3', 'a', 'abc')
        >>> shard_segments("serde")
        ('se', 'rd', 'serde')
    """
    if not name:
        raise ValueError("package name cannot be empty")

    length = len(name)
    if length == 1:
        return ("1", name)
    if length == 2:
        return ("2", name)
    if length == 3:
        return ("3", name[0], name)
    return (name[0:2], name[2:4], name)


def shard_path(name: str) -> str:
    """Return the shard segments joined with '/' (URL and display form)."""
    return "/".join(shard_segments(name))
