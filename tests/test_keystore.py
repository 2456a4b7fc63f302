"""Tests for lib/keystore.py - KeyMaterialStore."""

import stat
from pathlib import Path

import pytest

from devman_cli.lib.errors import KeyMaterialError
from devman_cli.lib.keystore import KeyMaterialStore
from devman_cli.lib.result import Err, Ok


class TestKeyMaterialStore:
    """Existence checks and atomic writes under an explicit key directory."""

    def test_path_for_uses_key_dir(self, tmp_path: Path) -> None:
        store = KeyMaterialStore(tmp_path)
        assert store.path_for("tv_webos") == tmp_path / "tv_webos"

    def test_exists(self, tmp_path: Path) -> None:
        store = KeyMaterialStore(tmp_path)
        assert store.exists("tv_webos") is False
        (tmp_path / "tv_webos").write_bytes(b"x")
        assert store.exists("tv_webos") is True

    def test_write_creates_dir_and_file(self, tmp_path: Path) -> None:
        key_dir = tmp_path / "nested" / "ssh"
        store = KeyMaterialStore(key_dir)

        result = store.write("tv_webos", b"key bytes")

        assert result == Ok(key_dir / "tv_webos")
        assert (key_dir / "tv_webos").read_bytes() == b"key bytes"

    def test_write_is_owner_only(self, tmp_path: Path) -> None:
        store = KeyMaterialStore(tmp_path)
        store.write("tv_webos", b"key bytes")

        mode = (tmp_path / "tv_webos").stat().st_mode
        assert stat.S_IMODE(mode) == 0o600

    def test_write_overwrites(self, tmp_path: Path) -> None:
        store = KeyMaterialStore(tmp_path)
        store.write("tv_webos", b"old")
        store.write("tv_webos", b"new")

        assert (tmp_path / "tv_webos").read_bytes() == b"new"
        assert [p.name for p in tmp_path.iterdir()] == ["tv_webos"]

    def test_write_failure_is_key_material_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        store = KeyMaterialStore(blocker)

        result = store.write("tv_webos", b"key")

        assert isinstance(result, Err)
        assert result.error.key_name == "tv_webos"
        assert result.error.stage == "write"

    def test_cleanup_failure_still_reports_write_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def fail_replace(self, target):
            raise OSError("rename failed")

        def fail_unlink(self, missing_ok=False):
            raise PermissionError("unlink denied")

        monkeypatch.setattr(Path, "replace", fail_replace)
        monkeypatch.setattr(Path, "unlink", fail_unlink)

        result = KeyMaterialStore(tmp_path).write("tv_webos", b"key")

        assert result == Err(KeyMaterialError("tv_webos", "write", "rename failed"))
