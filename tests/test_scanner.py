"""Tests for manifest building."""

import hashlib
import os
from pathlib import Path

import pytest

from pynetlify.deploy.scanner import Manifest, ManifestBuilder


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


@pytest.fixture
def site_dir(tmp_path):
    """Create a small site tree with ignored entries at several depths."""
    (tmp_path / "index.html").write_bytes(b"<h1>home</h1>")
    (tmp_path / "css").mkdir()
    (tmp_path / "css" / "site.css").write_bytes(b"body {}")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "config").write_bytes(b"[core]")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js").write_bytes(b"js")
    (tmp_path / "docs" / ".netlify").mkdir(parents=True)
    (tmp_path / "docs" / ".netlify" / "state.json").write_bytes(b"{}")
    (tmp_path / "docs" / "guide.html").write_bytes(b"guide")
    (tmp_path / ".DS_Store").write_bytes(b"meta")
    (tmp_path / "css" / ".DS_Store").write_bytes(b"meta")
    return tmp_path


class TestManifestBuilder:
    """Test ManifestBuilder functionality."""

    def test_single_file_with_ignored_git_dir(self, tmp_path):
        """Test a root with index.html and an ignored .git/config."""
        (tmp_path / "index.html").write_bytes(b"hello")
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "config").write_bytes(b"[core]")

        manifest = ManifestBuilder().build(tmp_path)

        h1 = sha1(b"hello")
        assert manifest.files == {"/index.html": h1}
        assert list(manifest.path_index) == ["/index.html"]
        assert manifest.path_index["/index.html"] == (tmp_path / "index.html").resolve()
        assert manifest.hash_index == {h1: "/index.html"}

    def test_ignored_entries_excluded_at_any_depth(self, site_dir):
        """Test that ignored directories and files are skipped everywhere."""
        manifest = ManifestBuilder().build(site_dir)

        assert set(manifest.files) == {
            "/index.html",
            "/css/site.css",
            "/docs/guide.html",
        }
        for path in manifest.files:
            assert "/.git/" not in path
            assert "/node_modules/" not in path
            assert "/.netlify/" not in path
            assert not path.endswith(".DS_Store")

    def test_paths_are_normalized(self, site_dir):
        """Test that every key starts with one slash and uses forward slashes."""
        manifest = ManifestBuilder().build(site_dir)

        for path in manifest.files:
            assert path.startswith("/")
            assert not path.startswith("//")
            assert "\\" not in path

    def test_every_manifest_key_has_a_local_file(self, site_dir):
        """Test that path index and hash index agree with the manifest."""
        manifest = ManifestBuilder().build(site_dir)

        assert set(manifest.path_index) == set(manifest.files)
        for path, digest in manifest.files.items():
            local = manifest.path_index[path]
            assert local.is_file()
            assert sha1(local.read_bytes()) == digest
            assert manifest.hash_index[digest] == path

    def test_rebuild_is_deterministic(self, site_dir):
        """Test that scanning an unchanged tree twice gives the same manifest."""
        builder = ManifestBuilder()
        first = builder.build(site_dir)
        second = builder.build(site_dir)

        assert first.files == second.files
        assert first.path_index == second.path_index

    def test_empty_directory(self, tmp_path):
        """Test that an empty root gives an empty manifest."""
        manifest = ManifestBuilder().build(tmp_path)
        assert manifest.is_empty
        assert len(manifest) == 0

    def test_only_ignored_entries_gives_empty_manifest(self, tmp_path):
        """Test a root holding nothing but ignored entries."""
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "HEAD").write_bytes(b"ref")
        (tmp_path / ".DS_Store").write_bytes(b"meta")

        assert ManifestBuilder().build(tmp_path).is_empty

    def test_duplicate_content_keeps_one_hash_entry(self, tmp_path):
        """Test that files sharing content share a single hash index entry."""
        (tmp_path / "a.txt").write_bytes(b"same")
        (tmp_path / "b.txt").write_bytes(b"same")

        manifest = ManifestBuilder().build(tmp_path)

        digest = sha1(b"same")
        assert manifest.files == {"/a.txt": digest, "/b.txt": digest}
        assert len(manifest.hash_index) == 1
        assert manifest.hash_index[digest] in {"/a.txt", "/b.txt"}

    def test_custom_ignore_sets(self, tmp_path):
        """Test that ignore sets can be replaced."""
        (tmp_path / "build").mkdir()
        (tmp_path / "build" / "out.js").write_bytes(b"x")
        (tmp_path / ".git").mkdir()
        (tmp_path / ".git" / "config").write_bytes(b"y")
        (tmp_path / "Thumbs.db").write_bytes(b"z")

        builder = ManifestBuilder(ignore_dirs={"build"}, ignore_files={"Thumbs.db"})
        manifest = builder.build(tmp_path)

        assert set(manifest.files) == {"/.git/config"}

    def test_ignore_patterns(self, site_dir):
        """Test glob patterns against names and relative paths."""
        (site_dir / "css" / "site.css.map").write_bytes(b"map")

        builder = ManifestBuilder(ignore_patterns=["*.map", "docs/*"])
        manifest = builder.build(site_dir)

        assert set(manifest.files) == {"/index.html", "/css/site.css"}

    def test_missing_root_raises(self, tmp_path):
        """Test that a missing root fails before scanning."""
        with pytest.raises(FileNotFoundError):
            ManifestBuilder().build(tmp_path / "missing")

    def test_file_root_raises(self, tmp_path):
        """Test that a file root is rejected."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(NotADirectoryError):
            ManifestBuilder().build(path)

    def test_read_error_aborts_build(self, site_dir, monkeypatch):
        """Test that a file read error aborts the whole build."""

        def failing_digest(path, chunk_size):
            raise PermissionError(f"denied: {path}")

        monkeypatch.setattr(
            "pynetlify.deploy.scanner.calculate_file_digest", failing_digest
        )
        with pytest.raises(PermissionError):
            ManifestBuilder().build(site_dir)

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_symlinked_directories_are_not_followed(self, tmp_path):
        """Test that a symlink to a directory is skipped."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "secret.txt").write_bytes(b"secret")
        root = tmp_path / "root"
        root.mkdir()
        (root / "index.html").write_bytes(b"hi")
        try:
            (root / "linked").symlink_to(outside, target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlinks")

        manifest = ManifestBuilder().build(root)

        assert set(manifest.files) == {"/index.html"}


class TestManifestResolve:
    """Tests for resolving required entries to local files."""

    @pytest.fixture
    def manifest(self, tmp_path):
        manifest = Manifest(root=tmp_path)
        manifest.add("/index.html", tmp_path / "index.html", "a" * 40)
        manifest.add("/css/site.css", tmp_path / "css" / "site.css", "b" * 40)
        return manifest

    def test_direct_path(self, manifest, tmp_path):
        assert manifest.resolve("/index.html") == (
            "/index.html",
            tmp_path / "index.html",
        )

    def test_path_without_leading_slash(self, manifest, tmp_path):
        assert manifest.resolve("css/site.css") == (
            "/css/site.css",
            tmp_path / "css" / "site.css",
        )

    def test_digest_fallback(self, manifest, tmp_path):
        assert manifest.resolve("b" * 40) == (
            "/css/site.css",
            tmp_path / "css" / "site.css",
        )

    def test_uppercase_digest_fallback(self, manifest, tmp_path):
        assert manifest.resolve("B" * 40) == (
            "/css/site.css",
            tmp_path / "css" / "site.css",
        )

    def test_unknown_digest(self, manifest):
        assert manifest.resolve("c" * 40) is None

    def test_unknown_path(self, manifest):
        assert manifest.resolve("/missing.html") is None

    def test_round_trip_through_indexes(self, tmp_path):
        """Test that a manifest path maps back to the file behind its digest."""
        (tmp_path / "a").mkdir()
        (tmp_path / "a" / "b.txt").write_bytes(b"round trip")

        manifest = ManifestBuilder().build(tmp_path)
        digest = manifest.files["/a/b.txt"]

        assert manifest.resolve(digest) == (
            "/a/b.txt",
            Path(tmp_path / "a" / "b.txt").resolve(),
        )
