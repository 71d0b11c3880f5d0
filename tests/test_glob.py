"""
Glob expansion tests

Builds small asset trees under tmp_path; match order is filesystem order,
so results are compared sorted.
"""

import os

import pytest

from rucksack.lib.errors import FilesystemError
from rucksack.lib import globber
from rucksack.lib.globber import glob_expand, key_derive


@pytest.fixture
def assets(tmp_path, monkeypatch):
    """assets/{a.png, b.png, notes.txt, sub/} with tmp_path as cwd"""
    root = tmp_path / "assets"
    (root / "sub").mkdir(parents=True)
    for name in ("a.png", "b.png", "notes.txt"):
        (root / name).write_bytes(b"\x89PNG")
    (root / "sub" / "c.png").write_bytes(b"\x89PNG")
    monkeypatch.chdir(tmp_path)
    return root


def iglob_failing(error, *paths):
    """Stand-in for glob.iglob that yields paths, then fails mid-enumeration"""
    def iglob(pattern):
        yield from paths
        raise error
    return iglob


class TestKeyDerive:
    """Test bundle key computation"""

    def test_strips_root_and_separator(self):
        assert key_derive("assets/a.png", "icons/", "assets") == "icons/a.png"

    def test_strips_root_with_trailing_separator(self):
        assert key_derive("assets/a.png", "", "assets/") == "a.png"

    def test_match_outside_root_used_whole(self):
        assert key_derive("/elsewhere/a.png", "icons/", "assets") == "icons//elsewhere/a.png"

    def test_match_equal_to_root_used_whole(self):
        assert key_derive("assets", "k/", "assets") == "k/assets"

    def test_string_prefix_not_path_prefix(self):
        """Root stripping compares characters, not path components"""
        assert key_derive("assets2/a.png", "", "assets") == "2/a.png"


class TestGlobExpand:
    """Test enumeration of matching files"""

    def test_relative_root(self, assets):
        """Directories are skipped; keys drop the root prefix"""
        pairs = sorted(glob_expand("assets/*", "icons/", "assets"))
        assert pairs == [
            ("icons/a.png", "assets/a.png"),
            ("icons/b.png", "assets/b.png"),
            ("icons/notes.txt", "assets/notes.txt"),
        ]

    def test_absolute_root(self, assets):
        root = str(assets)
        pairs = sorted(glob_expand(os.path.join(root, "*.png"), "", root))
        assert [key for key, _ in pairs] == ["a.png", "b.png"]
        assert all(path.startswith(root) for _, path in pairs)

    def test_nested_pattern(self, assets):
        pairs = list(glob_expand("assets/*/*.png", "gfx/", "assets"))
        assert pairs == [("gfx/sub/c.png", "assets/sub/c.png")]

    def test_only_directories_matched(self, assets):
        """A pattern that matches only directories yields nothing, without error"""
        assert list(glob_expand("assets/su*", "", "assets")) == []

    def test_no_matches(self, assets):
        with pytest.raises(FilesystemError) as exc:
            list(glob_expand("assets/*.ogg", "sfx/", "assets"))
        assert exc.value.message == "no patterns matched"
        assert exc.value.path == "assets/*.ogg"

    def test_dangling_symlink(self, assets):
        """A match that cannot be stat'ed stops the expansion"""
        os.symlink(assets / "missing.png", assets / "dangling")
        with pytest.raises(FilesystemError) as exc:
            list(glob_expand("assets/dangling", "", "assets"))
        assert exc.value.message == "unable to stat assets/dangling"

    def test_lazy(self, assets):
        """Matches are produced one at a time"""
        pairs = glob_expand("assets/*.png", "", "assets")
        key, path = next(pairs)
        assert os.path.isfile(path)
        assert key in ("a.png", "b.png")

    @pytest.mark.parametrize("error, message", [
        (OSError("directory vanished"), "read error while globbing"),
        (ValueError("embedded null byte"), "read error while globbing"),
        (MemoryError(), "out of memory"),
    ])
    def test_enumeration_failure(self, assets, monkeypatch, error, message):
        """Failures while listing matches name the pattern"""
        monkeypatch.setattr(globber.glob, "iglob", iglob_failing(error))
        with pytest.raises(FilesystemError) as exc:
            list(glob_expand("assets/*.png", "", "assets"))
        assert exc.value.message == message
        assert exc.value.path == "assets/*.png"

    def test_matches_before_failure_yielded(self, assets, monkeypatch):
        """Pairs found before enumeration breaks have already been handed out"""
        monkeypatch.setattr(globber.glob, "iglob", iglob_failing(OSError("eio"), "assets/a.png"))
        pairs = glob_expand("assets/*.png", "", "assets")
        assert next(pairs) == ("a.png", "assets/a.png")
        with pytest.raises(FilesystemError, match="read error while globbing"):
            next(pairs)
