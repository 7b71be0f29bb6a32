"""
Crate resolution: presence check, mirror fetch, checksum verification, persist.

Per record the resolver ends in exactly one terminal state:

    START -> present                       -> SKIPPED
    START -> missing -> 200, digest match  -> PERSISTED
                     -> 200, mismatch      -> REJECTED
                     -> non-200 / network  -> FAILED

Only PERSISTED writes to the cache. Fetch and verification failures are
returned as outcomes; a failed write raises PersistError.
"""
from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol

from .errors import ArtifactDownloadError, PersistError
from .index import lookup_checksum
from .layout import RegistryLayout
from .models import (
    ArtifactRecord,
    PackageRef,
    ResolveOutcome,
    ResolveStatus,
    RunSummary,
)

__all__ = [
    "ArtifactFetcher",
    "ArtifactResolver",
    "build_records",
    "is_present",
    "persist_bytes",
    "sha256_hex",
    "verify",
]

logger = logging.getLogger(__name__)


class ArtifactFetcher(Protocol):
    """Anything that can download crate bytes (MirrorClient, test fakes)."""

    def fetch(self, ref: PackageRef) -> bytes:
        """
        Raises:
            ArtifactDownloadError: On non-200 responses or transport errors
        """
        ...


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def verify(checksum: str, data: Optional[bytes]) -> bool:
    """
    Check fetched bytes against the index checksum.

    An empty checksum or missing data never verifies. Hex case is ignored.
    """
    if not checksum or data is None:
        return False
    return sha256_hex(data) == checksum.strip().lower()


def is_present(layout: RegistryLayout, cache_path: Path) -> bool:
    """True if the .crate file or its extracted source directory exists."""
    return cache_path.exists() or layout.src_path_for(cache_path).exists()


def persist_bytes(target_path: Path, data: bytes) -> None:
    """
    Write ``data`` to ``target_path`` atomically (temp file + rename).

    Raises:
        PersistError: If the file cannot be written; no partial file is left
    """
    temp_path: Optional[Path] = None
    try:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=".cargo-mirror.tmp.", dir=target_path.parent)
        temp_path = Path(temp_name)
        with os.fdopen(fd, "wb") as out:
            out.write(data)
            out.flush()
            os.fsync(out.fileno())
        os.replace(temp_path, target_path)
    except OSError as e:
        if temp_path is not None:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
        raise PersistError(f"Failed to write {target_path}: {e}") from e


def build_records(layout: RegistryLayout, refs: Iterable[PackageRef]) -> list[ArtifactRecord]:
    """
    Create one record per package and fill in its checksum from the index.
    """
    records = []
    for ref in refs:
        record = ArtifactRecord(ref=ref, cache_path=layout.cache_path(ref))
        record.checksum = lookup_checksum(layout.index_dir, ref.name, ref.version)
        if not record.checksum:
            logger.warning(f"No index checksum for {ref}; a mirror download cannot be verified")
        records.append(record)
    return records


class ArtifactResolver:
    """
    Ensure a verified crate exists at each record's cache path.

    Records are processed one at a time in the order given; no state is
    shared between them.
    """

    def __init__(self, layout: RegistryLayout, fetcher: ArtifactFetcher):
        self.layout = layout
        self.fetcher = fetcher

    def resolve(self, record: ArtifactRecord) -> ResolveOutcome:
        """
        Drive one record to a terminal state.

        Raises:
            PersistError: If verified bytes cannot be written to the cache
        """
        ref = record.ref

        if is_present(self.layout, record.cache_path):
            logger.debug(f"{ref} already present, skipping")
            return ResolveOutcome(ref=ref, status=ResolveStatus.SKIPPED)

        try:
            record.data = self.fetcher.fetch(ref)
        except ArtifactDownloadError as e:
            logger.warning(f"download {ref} failed: {e}")
            return ResolveOutcome(ref=ref, status=ResolveStatus.FAILED, detail=str(e))

        if not verify(record.checksum, record.data):
            if record.checksum:
                detail = f"checksum mismatch: expected {record.checksum}, got {sha256_hex(record.data)}"
            else:
                detail = "no checksum in local index"
            record.data = None
            logger.warning(f"rejecting {ref}: {detail}")
            return ResolveOutcome(ref=ref, status=ResolveStatus.REJECTED, detail=detail)

        size = len(record.data)
        persist_bytes(record.cache_path, record.data)
        logger.info(f"saved {ref} to {record.cache_path} ({size} bytes)")
        return ResolveOutcome(ref=ref, status=ResolveStatus.PERSISTED, size=size)

    def resolve_all(
        self,
        records: Iterable[ArtifactRecord],
        on_outcome: Optional[Callable[[ResolveOutcome], None]] = None,
    ) -> RunSummary:
        """Resolve records in order, reporting each outcome as it happens."""
        summary = RunSummary()
        for record in records:
            outcome = self.resolve(record)
            summary.add(outcome)
            if on_outcome is not None:
                on_outcome(outcome)
        return summary
