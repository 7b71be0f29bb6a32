"""
Cargo.lock reading.

Only the ``[[package]]`` name/version/source triples are extracted; the
dependency graph is left to Cargo.
"""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Iterable, List

from .errors import LockfileError
from .models import PackageRef, SourceKind

__all__ = ["parse_lockfile", "read_lockfile", "official_packages"]

logger = logging.getLogger(__name__)


def parse_lockfile(text: str) -> List[PackageRef]:
    """
    Parse Cargo.lock content into package references, in file order.

    Raises:
        LockfileError: If the text is not valid TOML or an entry lacks name/version
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise LockfileError(f"Cargo.lock is not valid TOML: {e}") from e

    packages = data.get("package", [])
    if not isinstance(packages, list):
        raise LockfileError("Cargo.lock 'package' must be an array of tables")

    refs = []
    for i, entry in enumerate(packages):
        name = entry.get("name") if isinstance(entry, dict) else None
        version = entry.get("version") if isinstance(entry, dict) else None
        if not isinstance(name, str) or not isinstance(version, str) or not name or not version:
            raise LockfileError(f"Cargo.lock package #{i + 1} is missing name or version")
        refs.append(PackageRef(
            name=name,
            version=version,
            source=SourceKind.from_source(entry.get("source")),
        ))
    return refs


def read_lockfile(path: Path) -> List[PackageRef]:
    """Read and parse a Cargo.lock file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise LockfileError(f"Cannot read {path}: {e}") from e
    refs = parse_lockfile(text)
    logger.debug(f"Read {len(refs)} packages from {path}")
    return refs


def official_packages(refs: Iterable[PackageRef]) -> List[PackageRef]:
    """Keep only packages sourced from the official registry."""
    return [ref for ref in refs if ref.source is SourceKind.OFFICIAL]
