"""
Checksum lookup against the locally mirrored package index.

Each index file holds one JSON record per line, one line per published
version, appended in publication order. Lookups never touch the network.
"""
from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from .models import IndexRecord
from .shard import shard_segments

__all__ = ["index_file_path", "lookup_checksum"]

logger = logging.getLogger(__name__)


def index_file_path(index_dir: Path, name: str) -> Path:
    """Path of the index file for ``name`` under ``index_dir``."""
    return Path(index_dir).joinpath(*shard_segments(name))


def lookup_checksum(index_dir: Path, name: str, version: str) -> str:
    """
    Return the official checksum of ``name`` at exactly ``version``.

    The first record matching the version wins; later duplicates are ignored.
    Lines that do not parse as a record are skipped.

    Args:
        index_dir: Root of the local index checkout
        name: Package name
        version: Exact version string

    Returns:
        Hex checksum as recorded, or "" when the package file is missing or no
        record matches. Callers must treat "" as unverifiable.
    """
    path = index_file_path(index_dir, name)
    try:
        handle = open(path, "r", encoding="utf-8", errors="replace")
    except FileNotFoundError:
        logger.debug(f"No index file for {name} at {path}")
        return ""
    except OSError as e:
        logger.warning(f"Cannot read index file {path}: {e}")
        return ""

    with handle:
        for lineno, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                record = IndexRecord.model_validate_json(line)
            except ValidationError:
                logger.debug(f"Skipping malformed index line {path}:{lineno}")
                continue
            if record.vers == version:
                return record.cksum

    logger.debug(f"Version {version} of {name} not found in {path}")
    return ""
