"""
Thin wrapper around the ``cargo`` executable.

Cargo refreshes the index, locates the project, regenerates Cargo.lock and
finally runs the user's own subcommand.
"""
from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import List, Sequence

from .errors import CargoError, ConfigurationError, IndexUpdateError

__all__ = ["Cargo", "INDEX_REFRESH_CRATE"]

logger = logging.getLogger(__name__)

# Any published crate; searching for it makes cargo update its index
INDEX_REFRESH_CRATE = "cargo-mirror"


class Cargo:
    """Runs cargo as a subprocess."""

    def __init__(self, binary: str = "cargo"):
        self.binary = binary

    def command(self, args: Sequence[str]) -> List[str]:
        return [self.binary, *args]

    def _capture(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        cmd = self.command(args)
        logger.debug(f"Running {' '.join(cmd)}")
        try:
            return subprocess.run(cmd, capture_output=True, text=True, check=False)
        except OSError as e:
            raise CargoError(f"Cannot execute {self.binary}: {e}") from e

    def update_index(self) -> None:
        """
        Refresh the local registry index.

        Raises:
            CargoError: If cargo cannot be executed
            IndexUpdateError: If cargo exits non-zero (usually no network)
        """
        result = self._capture(["search", INDEX_REFRESH_CRATE, "--limit", "1"])
        if result.returncode != 0:
            raise IndexUpdateError(f"Updating the registry index failed: {result.stderr.strip()}")

    def locate_project(self) -> Path:
        """
        Return the Cargo.toml at the root of the current workspace.

        Cargo.lock is shared by all workspace members and lives beside the
        root manifest, so members resolve to the workspace root.

        Raises:
            ConfigurationError: If not inside a cargo project
        """
        try:
            result = self._capture(["locate-project", "--workspace"])
        except CargoError as e:
            raise ConfigurationError(str(e)) from e
        if result.returncode != 0:
            raise ConfigurationError(f"must be in a cargo project directory: {result.stderr.strip()}")
        try:
            root = json.loads(result.stdout)["root"]
        except (json.JSONDecodeError, KeyError, TypeError) as e:
            raise ConfigurationError(f"Couldn't parse the output of `cargo locate-project --workspace`: {e}") from e
        return Path(root)

    def ensure_lockfile(self, manifest: Path) -> Path:
        """
        Return Cargo.lock next to ``manifest``, regenerating it when missing
        or older than the manifest.

        Raises:
            ConfigurationError: If the manifest cannot be read
            CargoError: If ``cargo generate-lockfile`` fails
        """
        manifest = Path(manifest)
        lockfile = manifest.with_name("Cargo.lock")
        try:
            manifest_mtime = manifest.stat().st_mtime
        except OSError as e:
            raise ConfigurationError(f"Cannot stat {manifest}: {e}") from e

        if not lockfile.exists() or lockfile.stat().st_mtime < manifest_mtime:
            logger.info(f"Generating {lockfile}")
            result = self._capture(["generate-lockfile", "--manifest-path", str(manifest)])
            if result.returncode != 0:
                raise CargoError(f"Cargo.lock must be generated: {result.stderr.strip()}")
        return lockfile

    def run(self, args: Sequence[str]) -> int:
        """Run ``cargo <args>`` with inherited stdio and return its exit code."""
        cmd = self.command(args)
        try:
            return subprocess.run(cmd, check=False).returncode
        except OSError as e:
            raise CargoError(f"Cannot execute {self.binary}: {e}") from e
