"""
Registry path construction helpers.

Centralizes the Cargo registry layout (cache, src and index areas) and the
mirror URL so all of them share one sharding derivation.
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .index import index_file_path
from .models import PackageRef
from .settings import Settings
from .shard import shard_path

__all__ = ["RegistryLayout", "crate_filename", "mirror_url"]

CRATE_SUFFIX = ".crate"


def crate_filename(ref: PackageRef) -> str:
    """
    Canonical artifact file name.

    Examples:
        >>> crate_filename(PackageRef("serde", "1.0.130"))
        'serde-1.0.130.crate'
    """
    return f"{ref.name}-{ref.version}{CRATE_SUFFIX}"


def mirror_url(mirror_base: str, ref: PackageRef) -> str:
    """
    Build the download URL for a crate on the mirror.

    Returns:
        ``<mirror_base>/<shard-path>/<name>-<version>.crate``

    Examples:
        >>> mirror_url("https://mirrors.ustc.edu.cn/crates/", PackageRef("abc", "0.1.0"))
        'https://mirrors.ustc.edu.cn/crates/3/a/abc/abc-0.1.0.crate'
    """
    return f"{mirror_base.rstrip('/')}/{shard_path(ref.name)}/{crate_filename(ref)}"


@dataclass(frozen=True)
class RegistryLayout:
    """
    Cargo's on-disk registry layout for one index.

        <cargo_home>/registry/cache/<index_id>/<name>-<version>.crate
        <cargo_home>/registry/src/<index_id>/<name>-<version>/
        <cargo_home>/registry/index/<index_id>/<shard>/<name>
    """
    cargo_home: Path
    index_id: str

    @classmethod
    def from_settings(cls, settings: Settings) -> RegistryLayout:
        return cls(cargo_home=Path(settings.cargo_home), index_id=settings.index_id)

    @property
    def registry_dir(self) -> Path:
        return self.cargo_home / "registry"

    @property
    def cache_dir(self) -> Path:
        return self.registry_dir / "cache" / self.index_id

    @property
    def src_dir(self) -> Path:
        return self.registry_dir / "src" / self.index_id

    @property
    def index_dir(self) -> Path:
        return self.registry_dir / "index" / self.index_id

    def cache_path(self, ref: PackageRef) -> Path:
        return self.cache_dir / crate_filename(ref)

    def src_path(self, ref: PackageRef) -> Path:
        """Extracted-source directory for the crate at cache_path(ref)."""
        return self.src_path_for(self.cache_path(ref))

    def src_path_for(self, cache_path: Path) -> Path:
        """
        Map a cache file path to its extracted-source directory.

        Only the ``registry/cache`` area segment is swapped for ``registry/src``;
        a ``cache`` component elsewhere in the path is left alone.

        Raises:
            ValueError: If cache_path is not inside this layout's cache area
        """
        relative = Path(cache_path).relative_to(self.registry_dir / "cache")
        name = relative.name
        if name.endswith(CRATE_SUFFIX):
            name = name[: -len(CRATE_SUFFIX)]
        return self.registry_dir / "src" / relative.parent / name

    def index_file(self, name: str) -> Path:
        return index_file_path(self.index_dir, name)
