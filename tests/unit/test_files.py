"""
Unit tests for file loading.
"""

import os

import pytest

from fixturehttpd.handlers.files import (
    FileLoader,
    FileLoadError,
    FileNotFound,
    FileUnreadable,
    prepare_fixture_dirs,
)


class TestFileLoader:
    """Tests for FileLoader.load()."""

    def test_load(self, serve_dir):
        assert FileLoader(serve_dir).load("data.bin") == (serve_dir / "data.bin").read_bytes()

    def test_reads_fresh_each_time(self, serve_dir):
        loader = FileLoader(serve_dir)
        loader.load("test_file")
        (serve_dir / "test_file").write_bytes(b"changed")

        assert loader.load("test_file") == b"changed"

    def test_missing(self, serve_dir):
        with pytest.raises(FileNotFound) as exc_info:
            FileLoader(serve_dir).load("missing")

        assert exc_info.value.path == "missing"

    def test_file_used_as_directory(self, serve_dir):
        with pytest.raises(FileNotFound):
            FileLoader(serve_dir).load("test_file/child")

    def test_escape_root(self, serve_dir):
        with pytest.raises(FileNotFound):
            FileLoader(serve_dir / "relative").load("../test_file")

    def test_dotdot_inside_root(self, serve_dir):
        assert FileLoader(serve_dir).load("relative/../data.bin")[:3] == b"\x00\x01\x02"

    def test_directory(self, serve_dir):
        with pytest.raises(FileUnreadable):
            FileLoader(serve_dir).load("relative")

    def test_size_limit(self, serve_dir):
        loader = FileLoader(serve_dir, max_file_size=999)

        with pytest.raises(FileUnreadable, match="too large"):
            loader.load("data.bin")

    def test_size_limit_inclusive(self, serve_dir):
        assert len(FileLoader(serve_dir, max_file_size=1000).load("data.bin")) == 1000

    @pytest.mark.skipif(
        not hasattr(os, "geteuid") or os.geteuid() == 0,
        reason="root ignores file permissions",
    )
    def test_permission_denied(self, serve_dir):
        path = serve_dir / "secret"
        path.write_bytes(b"x")
        path.chmod(0)
        try:
            with pytest.raises(FileUnreadable):
                FileLoader(serve_dir).load("secret")
        finally:
            path.chmod(0o644)

    def test_error_hierarchy(self):
        assert issubclass(FileNotFound, FileLoadError)
        assert issubclass(FileUnreadable, FileLoadError)


class TestPrepareFixtureDirs:
    """Tests for prepare_fixture_dirs()."""

    def test_creates_relative(self, tmp_path):
        prepare_fixture_dirs(tmp_path)
        assert (tmp_path / "relative").is_dir()

    def test_idempotent(self, tmp_path):
        prepare_fixture_dirs(tmp_path)
        prepare_fixture_dirs(tmp_path)
        assert (tmp_path / "relative").is_dir()

    def test_custom_dirs(self, tmp_path):
        prepare_fixture_dirs(tmp_path, dirs=("a", "b/c"))

        assert (tmp_path / "a").is_dir()
        assert (tmp_path / "b" / "c").is_dir()
