"""
Operations Facade - Application service layer.

Provides a clean interface between the CLI and the resolution pipeline,
centralizing command orchestration while keeping CLI commands thin and
testable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..cargo import Cargo
from ..errors import ChecksumNotFound, IndexUpdateError
from ..index import lookup_checksum
from ..layout import RegistryLayout
from ..lockfile import official_packages, read_lockfile
from ..models import ResolveOutcome, RunSummary
from ..resolver import ArtifactFetcher, ArtifactResolver, build_records
from ..settings import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpsConfig:
    """
    Per-invocation policy for the Operations facade.
    """
    update_index: bool = True     # Refresh the local index before resolving
    verbose: bool = False         # Report packages that were already present


class Operations:
    """
    Application service facade for CLI operations.

    One method per CLI verb. Settings, the cargo wrapper and the fetcher are
    injected so each step can be exercised with fakes. Fatal exceptions
    bubble up for central exit-code mapping in ``mappers``.
    """

    def __init__(self, config: OpsConfig, settings: Settings, cargo: Optional[Cargo] = None,
                 fetcher: Optional[ArtifactFetcher] = None):
        """
        Initialize Operations facade.

        Args:
            config: Invocation policy
            settings: Run settings
            cargo: Cargo wrapper (defaults to ``settings.cargo_bin``)
            fetcher: Crate fetcher (defaults to a MirrorClient on first use)
        """
        self.cfg = config
        self.settings = settings
        self.layout = RegistryLayout.from_settings(settings)
        self.cargo = cargo or Cargo(settings.cargo_bin)
        self._fetcher = fetcher

    @property
    def fetcher(self) -> ArtifactFetcher:
        if self._fetcher is None:
            from ..mirror import MirrorClient
            self._fetcher = MirrorClient(self.settings)
        return self._fetcher

    def lookup(self, name: str, version: str) -> str:
        """
        Return the local index checksum for one crate.

        Raises:
            ChecksumNotFound: If the index has no record for name/version
        """
        checksum = lookup_checksum(self.layout.index_dir, name, version)
        if not checksum:
            raise ChecksumNotFound(f"{name} {version} not found in {self.layout.index_dir}")
        return checksum

    def prefetch(self, on_outcome: Optional[Callable[[ResolveOutcome], None]] = None) -> RunSummary:
        """
        Download every missing official crate of the current project.

        Steps: refresh the index, locate the project, make sure Cargo.lock is
        current, look up checksums, then resolve each crate in lockfile order.

        Raises:
            ConfigurationError: If the project or lockfile cannot be found
            CargoError: If cargo cannot be executed or the lockfile cannot be generated
            PersistError: If a verified crate cannot be written
        """
        if self.cfg.update_index and self.settings.update_index:
            logger.info("Updating registry `https://github.com/rust-lang/crates.io-index`")
            try:
                self.cargo.update_index()
            except IndexUpdateError as e:
                logger.warning(f"{e}; verifying against the existing local index")

        manifest = self.cargo.locate_project()
        lockfile = self.cargo.ensure_lockfile(manifest)
        refs = official_packages(read_lockfile(lockfile))
        logger.debug(f"{len(refs)} official packages in {lockfile}")

        records = build_records(self.layout, refs)
        resolver = ArtifactResolver(self.layout, self.fetcher)
        return resolver.resolve_all(records, on_outcome=on_outcome)

    def passthrough_command(self, args: Sequence[str]) -> List[str]:
        return self.cargo.command(args)

    def passthrough(self, args: Sequence[str]) -> int:
        """Run ``cargo <args>`` verbatim and return its exit code."""
        return self.cargo.run(args)

    def close(self) -> None:
        close = getattr(self._fetcher, "close", None)
        if close is not None:
            close()
