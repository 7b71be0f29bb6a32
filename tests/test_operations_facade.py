"""
Test Operations facade wiring and integration.

Runs the whole prefetch pipeline against a temporary CARGO_HOME, a fake
cargo and a fake mirror.
"""
from __future__ import annotations

import hashlib
from dataclasses import replace

import pytest

from cargo_mirror.errors import CargoError, ChecksumNotFound, LockfileError
from cargo_mirror.models import PackageRef, ResolveStatus
from cargo_mirror.operations import Operations, OpsConfig


def _sha(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


class TestOperationsPrefetch:
    """Test the prefetch pipeline end to end."""

    def test_scenarios(self, settings, layout, mirror, write_index, project, official, fake_cargo_for):
        """Test present, missing, tampered, 404 and non-registry crates together."""
        good = b"serde crate bytes"
        write_index("serde", {"vers": "1.0.0", "cksum": _sha(good)})
        write_index("abc", {"vers": "0.1.0", "cksum": _sha(b"real abc")})
        write_index("libc", {"vers": "0.2.0", "cksum": _sha(b"libc")})
        write_index("rand", {"vers": "0.8.0", "cksum": _sha(b"rand")})
        mirror.put("serde", "1.0.0", good)
        mirror.put("abc", "0.1.0", b"evil abc")
        layout.src_path(PackageRef("libc", "0.2.0")).mkdir(parents=True)

        manifest = project(
            ("demo", "0.1.0", None),
            ("serde", "1.0.0", official),
            ("abc", "0.1.0", official),
            ("libc", "0.2.0", official),
            ("rand", "0.8.0", official),
            ("mylib", "0.3.0", "git+https://example.com/mylib#abc"),
        )
        ops = Operations(OpsConfig(), settings, cargo=fake_cargo_for(manifest), fetcher=mirror)

        summary = ops.prefetch()

        assert [(o.ref.name, o.status) for o in summary] == [
            ("serde", ResolveStatus.PERSISTED),
            ("abc", ResolveStatus.REJECTED),
            ("libc", ResolveStatus.SKIPPED),
            ("rand", ResolveStatus.FAILED),
        ]
        assert layout.cache_path(PackageRef("serde", "1.0.0")).read_bytes() == good
        assert not layout.cache_path(PackageRef("abc", "0.1.0")).exists()
        assert not layout.cache_path(PackageRef("rand", "0.8.0")).exists()
        assert [r.name for r in mirror.calls] == ["serde", "abc", "rand"]

    def test_index_update_respects_settings_and_config(self, settings, mirror, project, fake_cargo_for):
        manifest = project()

        cargo = fake_cargo_for(manifest)
        Operations(OpsConfig(), settings, cargo=cargo, fetcher=mirror).prefetch()
        assert cargo.index_updates == 0

        enabled = replace(settings, update_index=True)
        cargo = fake_cargo_for(manifest)
        Operations(OpsConfig(), enabled, cargo=cargo, fetcher=mirror).prefetch()
        assert cargo.index_updates == 1

        cargo = fake_cargo_for(manifest)
        Operations(OpsConfig(update_index=False), enabled, cargo=cargo, fetcher=mirror).prefetch()
        assert cargo.index_updates == 0

    def test_index_update_failure_continues(self, settings, mirror, write_index, project, official, fake_cargo_for):
        """Test a failed index refresh falls back to the existing local index."""
        write_index("serde", {"vers": "1.0.0", "cksum": _sha(b"s")})
        mirror.put("serde", "1.0.0", b"s")
        enabled = replace(settings, update_index=True)
        cargo = fake_cargo_for(project(("serde", "1.0.0", official)), index_ok=False)
        ops = Operations(OpsConfig(), enabled, cargo=cargo, fetcher=mirror)

        summary = ops.prefetch()
        ops.passthrough(["build"])

        assert cargo.index_updates == 1
        assert [o.status for o in summary] == [ResolveStatus.PERSISTED]
        assert cargo.runs == [["build"]]

    def test_cargo_spawn_failure_is_fatal(self, settings, mirror, project, fake_cargo_for):
        enabled = replace(settings, update_index=True)
        cargo = fake_cargo_for(project())

        def _missing():
            raise CargoError("Cannot execute cargo: not found")

        cargo.update_index = _missing
        with pytest.raises(CargoError):
            Operations(OpsConfig(), enabled, cargo=cargo, fetcher=mirror).prefetch()

    def test_missing_lockfile_is_fatal(self, settings, mirror, tmp_path, fake_cargo_for):
        cargo = fake_cargo_for(tmp_path / "nowhere" / "Cargo.toml")
        with pytest.raises(LockfileError):
            Operations(OpsConfig(), settings, cargo=cargo, fetcher=mirror).prefetch()

    def test_outcomes_streamed(self, settings, mirror, write_index, project, official, fake_cargo_for):
        write_index("serde", {"vers": "1.0.0", "cksum": _sha(b"s")})
        mirror.put("serde", "1.0.0", b"s")
        manifest = project(("serde", "1.0.0", official))
        seen = []

        Operations(OpsConfig(), settings, cargo=fake_cargo_for(manifest), fetcher=mirror).prefetch(
            on_outcome=seen.append
        )

        assert [o.status for o in seen] == [ResolveStatus.PERSISTED]


class TestOperationsOther:
    """Test lookup and passthrough."""

    def test_lookup(self, settings, write_index, tmp_path, fake_cargo_for):
        write_index("abc", {"vers": "0.1.0", "cksum": "aa" * 32}, {"vers": "0.1.0", "cksum": "bb" * 32})
        ops = Operations(OpsConfig(), settings, cargo=fake_cargo_for(tmp_path / "Cargo.toml"))
        assert ops.lookup("abc", "0.1.0") == "aa" * 32

    def test_lookup_miss(self, settings, tmp_path, fake_cargo_for):
        ops = Operations(OpsConfig(), settings, cargo=fake_cargo_for(tmp_path / "Cargo.toml"))
        with pytest.raises(ChecksumNotFound):
            ops.lookup("abc", "9.9.9")

    def test_passthrough(self, settings, tmp_path, fake_cargo_for):
        cargo = fake_cargo_for(tmp_path / "Cargo.toml", exit_code=101)
        ops = Operations(OpsConfig(), settings, cargo=cargo)

        assert ops.passthrough_command(["build", "--release"]) == ["cargo", "build", "--release"]
        assert ops.passthrough(["build", "--release"]) == 101
        assert cargo.runs == [["build", "--release"]]

    def test_default_fetcher_is_mirror_client(self, settings, tmp_path, fake_cargo_for):
        from cargo_mirror.mirror import MirrorClient

        ops = Operations(OpsConfig(), settings, cargo=fake_cargo_for(tmp_path / "Cargo.toml"))
        try:
            assert isinstance(ops.fetcher, MirrorClient)
            assert ops.fetcher.base_url == "https://mirror.test/crates"
        finally:
            ops.close()
