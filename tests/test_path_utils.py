"""路径工具：规范化、层级与前缀改写。"""

import pytest

from tablefs.core.exceptions import InvalidPathError
from tablefs.utils.path_utils import (
    basename,
    child_path,
    depth,
    is_child,
    is_descendant,
    is_root,
    normalize_path,
    parent_path,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, ""),
        ("", ""),
        ("/", ""),
        ("//", ""),
        ("a", "/a"),
        ("a/b.txt", "/a/b.txt"),
        ("/a/b/", "/a/b"),
        ("//a///b", "/a/b"),
        ("\\a\\b.txt", "/a/b.txt"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/x/a ", "/x/a "),
        (" /x", "/ /x"),
        ("/x/ a/b", "/x/ a/b"),
        ("/x/ /", "/x/ "),
    ],
)
def test_normalize_path_keeps_whitespace_in_segments(raw, expected):
    assert normalize_path(raw) == expected


def test_whitespace_variants_stay_distinct():
    assert normalize_path("/x/a ") != normalize_path("/x/a")


@pytest.mark.parametrize("raw", ["/a/../b", "./a", "/a/./b", ".."])
def test_normalize_path_rejects_relative_segments(raw):
    with pytest.raises(InvalidPathError):
        normalize_path(raw)


def test_root_depth_and_children():
    assert is_root("")
    assert not is_root("/a")
    assert depth("") == 1
    assert depth("/a") == 2
    assert depth("/a/b/c.txt") == 4
    assert is_child("/a", "")
    assert is_child("/a/b", "/a")
    assert not is_child("/a/b/c", "/a")


def test_is_descendant_requires_separator_boundary():
    assert is_descendant("/d/x.txt", "/d")
    assert is_descendant("/d/y/z.txt", "/d")
    assert not is_descendant("/d2/x.txt", "/d")
    assert not is_descendant("/d", "/d")
    assert is_descendant("/anything", "")


def test_child_path_preserves_suffix():
    assert child_path("/e", "/d", "/d/x.txt") == "/e/x.txt"
    assert child_path("/e/f", "/d", "/d/y/z.txt") == "/e/f/y/z.txt"
    # 只替换开头的前缀
    assert child_path("/e", "/d", "/d/d/d.txt") == "/e/d/d.txt"


def test_child_path_rejects_unrelated_path():
    with pytest.raises(ValueError):
        child_path("/e", "/d", "/d2/x.txt")


def test_parent_and_basename():
    assert parent_path("/a/b/c.txt") == "/a/b"
    assert parent_path("/a") == ""
    assert parent_path("") == ""
    assert basename("/a/b/c.txt") == "c.txt"
    assert basename("/a") == "a"
