"""Root pytest configuration for cargo-mirror tests."""
import json
from pathlib import Path

import pytest

from cargo_mirror.layout import RegistryLayout
from cargo_mirror.models import OFFICIAL_SOURCE
from cargo_mirror.settings import Settings
from tests.fakes.fake_cargo import FakeCargo
from tests.fakes.fake_mirror import FakeMirror

INDEX_ID = "github.com-1ecc6299db9ec823"


@pytest.fixture(autouse=True)
def test_env(monkeypatch, tmp_path):
    """Keep tests away from the real ~/.cargo and mirror settings."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("CARGO_HOME", raising=False)
    for key in ("CARGO_MIRROR", "CARGO_MIRROR_INDEX_ID", "CARGO_MIRROR_TIMEOUT",
                "CARGO_MIRROR_RETRY", "CARGO_MIRROR_CARGO", "CARGO_MIRROR_NO_UPDATE",
                "CARGO_MIRROR_VERBOSE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def cargo_home(tmp_path) -> Path:
    home = tmp_path / "cargo"
    (home / "registry" / "index" / INDEX_ID).mkdir(parents=True)
    return home


@pytest.fixture
def settings(cargo_home):
    """Standard test settings."""
    return Settings(
        cargo_home=cargo_home,
        mirror_url="https://mirror.test/crates",
        index_id=INDEX_ID,
        update_index=False,
    )


@pytest.fixture
def layout(settings):
    return RegistryLayout.from_settings(settings)


@pytest.fixture
def mirror():
    return FakeMirror()


@pytest.fixture
def write_index(layout):
    """Write index lines for a crate; dict entries are JSON-encoded."""
    def _write(name, *entries):
        path = layout.index_file(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = [e if isinstance(e, str) else json.dumps(e) for e in entries]
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def project(tmp_path):
    """A cargo project directory with a writable Cargo.lock."""
    root = tmp_path / "project"
    root.mkdir()
    manifest = root / "Cargo.toml"
    manifest.write_text('[package]\nname = "demo"\nversion = "0.1.0"\n', encoding="utf-8")

    def _lock(*packages):
        blocks = ["version = 3\n"]
        for name, version, source in packages:
            block = f'[[package]]\nname = "{name}"\nversion = "{version}"\n'
            if source:
                block += f'source = "{source}"\n'
            blocks.append(block)
        (root / "Cargo.lock").write_text("\n".join(blocks), encoding="utf-8")
        return manifest

    return _lock


@pytest.fixture
def official():
    return OFFICIAL_SOURCE


@pytest.fixture
def fake_cargo_for():
    def _make(manifest, **kwargs):
        return FakeCargo(manifest, **kwargs)
    return _make
