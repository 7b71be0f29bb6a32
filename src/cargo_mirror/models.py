"""
Data models for crate resolution.

PackageRef and ArtifactRecord describe one locked crate and its progress
through a run; IndexRecord validates a single line of the local index;
ResolveOutcome and RunSummary carry per-package results back to the CLI.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "OFFICIAL_SOURCE",
    "SourceKind",
    "PackageRef",
    "ArtifactRecord",
    "IndexRecord",
    "ResolveStatus",
    "ResolveOutcome",
    "RunSummary",
]

OFFICIAL_SOURCE = "registry+https://github.com/rust-lang/crates.io-index"


class SourceKind(str, Enum):
    """Where a locked package comes from."""
    OFFICIAL = "official"
    OTHER = "other"

    @classmethod
    def from_source(cls, source: Optional[str]) -> "SourceKind":
        return cls.OFFICIAL if source == OFFICIAL_SOURCE else cls.OTHER


@dataclass(frozen=True)
class PackageRef:
    """Identity of a locked package."""
    name: str
    version: str
    source: SourceKind = SourceKind.OFFICIAL

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("package name cannot be empty")
        if not self.version:
            raise ValueError(f"package {self.name} has an empty version")

    @property
    def label(self) -> str:
        return f"{self.name}-{self.version}"

    def __str__(self) -> str:
        return self.label


@dataclass
class ArtifactRecord:
    """
    Mutable per-run state for one package.

    checksum stays empty until the index lookup fills it; an empty checksum
    never verifies. data is set only after a successful HTTP fetch.
    """
    ref: PackageRef
    cache_path: Path
    checksum: str = ""
    data: Optional[bytes] = field(default=None, repr=False)

    def __str__(self) -> str:
        return f"name: {self.ref.name}, version: {self.ref.version}, checksum: {self.checksum}"


class IndexRecord(BaseModel):
    """One published version as recorded in the local index."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    vers: str = Field(..., description="Exact published version")
    cksum: str = Field(..., description="SHA-256 of the .crate file, lowercase hex")
    yanked: bool = False


class ResolveStatus(str, Enum):
    """Terminal states of the resolver state machine."""
    SKIPPED = "skipped"
    PERSISTED = "persisted"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolveOutcome:
    ref: PackageRef
    status: ResolveStatus
    size: int = 0
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status in (ResolveStatus.SKIPPED, ResolveStatus.PERSISTED)


@dataclass
class RunSummary:
    """Outcomes of a prefetch run, in processing order."""
    outcomes: List[ResolveOutcome] = field(default_factory=list)

    def add(self, outcome: ResolveOutcome) -> None:
        self.outcomes.append(outcome)

    def count(self, status: ResolveStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def failures(self) -> List[ResolveOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def total_bytes(self) -> int:
        return sum(o.size for o in self.outcomes)

    def __iter__(self) -> Iterator[ResolveOutcome]:
        return iter(self.outcomes)

    def __len__(self) -> int:
        return len(self.outcomes)
