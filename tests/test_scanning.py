import os
import pytest
from pathlib import Path

import media_migrator.scanning.walker as walker_module

from media_migrator.exceptions import DiscoveryError
from media_migrator.scanning.walker import TreeWalker


def test_walker_skips_hidden_and_directories(tmp_path):
    root = tmp_path
    (root / "b.jpg").write_bytes(b"b")
    (root / ".DS_Store").write_bytes(b"junk")

    sub = root / "A"
    sub.mkdir()
    (sub / "x.mov").write_bytes(b"x")
    (sub / "empty").mkdir()

    hidden_dir = root / ".thumbnails"
    hidden_dir.mkdir()
    (hidden_dir / "thumb.jpg").write_bytes(b"t")

    files = TreeWalker().walk(root)

    assert files == [root / "b.jpg", sub / "x.mov"]


def test_walker_order_is_depth_first_and_stable(tmp_path):
    root = tmp_path
    for rel in ["z.jpg", "a/2.jpg", "a/1.jpg", "a/deep/3.jpg", "B/4.jpg"]:
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(b"data")

    walker = TreeWalker()
    first = walker.walk(root)

    # Files of a directory come before its subdirectories, names case-insensitively sorted
    assert first == [
        root / "z.jpg",
        root / "a" / "1.jpg",
        root / "a" / "2.jpg",
        root / "a" / "deep" / "3.jpg",
        root / "B" / "4.jpg",
    ]
    assert walker.walk(root) == first


def test_walker_ignores_symlinks(tmp_path):
    target = tmp_path / "real.jpg"
    target.write_bytes(b"r")
    try:
        (tmp_path / "link.jpg").symlink_to(target)
    except OSError:
        pytest.skip("symlinks not supported")

    assert TreeWalker().walk(tmp_path) == [target]


def test_walker_raises_discovery_error_for_unlistable_root(tmp_path):
    with pytest.raises(DiscoveryError):
        TreeWalker().walk(tmp_path / "missing")


def _scandir_failing_for(name, error):
    real_scandir = os.scandir

    def scandir(path):
        if Path(path).name == name:
            raise error
        return real_scandir(path)

    return scandir


def test_walker_raises_discovery_error_for_unlistable_subdirectory(monkeypatch, tmp_path):
    (tmp_path / "a.jpg").write_bytes(b"a")
    locked = tmp_path / "albums" / "locked"
    locked.mkdir(parents=True)
    (locked / "b.jpg").write_bytes(b"b")
    monkeypatch.setattr(walker_module.os, "scandir", _scandir_failing_for("locked", PermissionError("denied")))

    with pytest.raises(DiscoveryError, match="locked"):
        TreeWalker().walk(tmp_path)


class UntypedEntry:
    """A directory entry whose type needs an lstat() that fails."""

    def __init__(self, path):
        self.path = str(path)
        self.name = Path(path).name

    def is_dir(self, follow_symlinks=True):
        raise FileNotFoundError(self.path)

    def is_file(self, follow_symlinks=True):
        raise FileNotFoundError(self.path)


class FakeScandir:
    def __init__(self, entries):
        self.entries = entries

    def __enter__(self):
        return iter(self.entries)

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


def test_walker_wraps_entry_type_errors(monkeypatch, tmp_path):
    monkeypatch.setattr(walker_module.os, "scandir", lambda path: FakeScandir([UntypedEntry(tmp_path / "gone.jpg")]))

    with pytest.raises(DiscoveryError, match="gone.jpg"):
        TreeWalker().walk(tmp_path)
