"""
Settings and configuration for cargo-mirror.

Centralizes configuration values and provides validation with fail-fast behavior.
Settings are loaded from environment variables once per process and passed
explicitly into every component.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import ConfigurationError

__all__ = [
    "Settings",
    "create_settings_from_env",
    "discover_index_id",
    "DEFAULT_MIRROR_URL",
    "DEFAULT_INDEX_ID",
]

DEFAULT_MIRROR_URL = "https://mirrors.ustc.edu.cn/crates"

# Directory name Cargo uses for the crates.io git index
DEFAULT_INDEX_ID = "github.com-1ecc6299db9ec823"

INDEX_ID_PREFIX = "github.com-"


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for a cargo-mirror run.

    Paths:
        cargo_home: Root of Cargo's on-disk state (registry cache, src, index)
        index_id: Registry directory name shared by cache/src/index areas

    Mirror:
        mirror_url: Base URL of the crate mirror
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Number of retries on transport errors (0=no retry)

    Cargo:
        cargo_bin: Cargo executable used for index refresh and passthrough
        update_index: Refresh the local index before resolving
    """
    cargo_home: Path
    mirror_url: str = DEFAULT_MIRROR_URL
    index_id: str = DEFAULT_INDEX_ID
    http_timeout_s: float = 30.0
    http_retry: int = 0
    cargo_bin: str = "cargo"
    update_index: bool = True

    def __post_init__(self):
        """Validate settings on construction."""
        if self.cargo_home is None or not str(self.cargo_home):
            raise ValueError("cargo_home is required")
        if isinstance(self.cargo_home, str):
            object.__setattr__(self, "cargo_home", Path(self.cargo_home))

        if not self.mirror_url:
            raise ValueError("mirror_url is required")

        url_pattern = r"^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$"
        if not re.match(url_pattern, self.mirror_url):
            raise ValueError(f"Invalid mirror_url format: {self.mirror_url}")

        if not self.index_id or "/" in self.index_id:
            raise ValueError(f"Invalid index_id: {self.index_id!r}")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

        if not self.cargo_bin:
            raise ValueError("cargo_bin is required")


def discover_index_id(cargo_home: Path) -> Optional[str]:
    """
    Find the crates.io index directory under ``<cargo_home>/registry/index``.

    Returns the directory name when exactly one ``github.com-*`` entry exists,
    otherwise None (caller falls back to DEFAULT_INDEX_ID).
    """
    index_root = Path(cargo_home) / "registry" / "index"
    if not index_root.is_dir():
        return None

    candidates = sorted(
        entry.name for entry in index_root.iterdir()
        if entry.is_dir() and entry.name.startswith(INDEX_ID_PREFIX)
    )
    if len(candidates) == 1:
        return candidates[0]
    return None


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - CARGO_HOME (default: $HOME/.cargo)
        - HOME (required when CARGO_HOME is unset)
        - CARGO_MIRROR (default: https://mirrors.ustc.edu.cn/crates)
        - CARGO_MIRROR_INDEX_ID (default: discovered, else github.com-1ecc6299db9ec823)
        - CARGO_MIRROR_TIMEOUT (default: 30.0)
        - CARGO_MIRROR_RETRY (default: 0)
        - CARGO_MIRROR_CARGO (default: cargo)
        - CARGO_MIRROR_NO_UPDATE (default: false)

    Returns:
        Settings object with validated configuration

    Raises:
        ConfigurationError: If no home directory can be resolved
        ValueError: If configuration values are invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    cargo_home_env = os.getenv("CARGO_HOME")
    if cargo_home_env:
        cargo_home = Path(cargo_home_env)
    else:
        home = os.getenv("HOME")
        if not home:
            raise ConfigurationError("environment variable $HOME must be set when $CARGO_HOME is not")
        cargo_home = Path(home) / ".cargo"

    index_id = os.getenv("CARGO_MIRROR_INDEX_ID") or discover_index_id(cargo_home) or DEFAULT_INDEX_ID

    return Settings(
        cargo_home=cargo_home,
        mirror_url=os.getenv("CARGO_MIRROR") or DEFAULT_MIRROR_URL,
        index_id=index_id,
        http_timeout_s=get_float("CARGO_MIRROR_TIMEOUT", 30.0),
        http_retry=get_int("CARGO_MIRROR_RETRY", 0),
        cargo_bin=os.getenv("CARGO_MIRROR_CARGO") or "cargo",
        update_index=not str_to_bool(os.getenv("CARGO_MIRROR_NO_UPDATE", "false")),
    )
