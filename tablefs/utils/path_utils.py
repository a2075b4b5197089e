"""Path utilities: normalize virtual paths and compute tree relationships.

These helpers centralize the rules every table operation relies on:
- A stored path always starts with '/' and never ends with '/';
- The tree root is represented by the empty string '' and is never stored;
- Descendants of a directory are the paths starting with ``directory + '/'``.
"""

from __future__ import annotations

from tablefs.core.exceptions import InvalidPathError

SEPARATOR = "/"
ROOT = ""


def normalize_path(p: str | None) -> str:
    """Collapse separators into the stored form; whitespace inside a segment is part of its name."""
    s = (p or "").replace("\\", SEPARATOR)
    parts = [part for part in s.split(SEPARATOR) if part]
    if any(part in {".", ".."} for part in parts):
        raise InvalidPathError(f"非法路径: {p}", {"path": p})
    if not parts:
        return ROOT
    return SEPARATOR + SEPARATOR.join(parts)


def is_root(path: str) -> bool:
    return path == ROOT


def depth(path: str) -> int:
    """Number of separators plus one; immediate children sit one level deeper."""
    return path.count(SEPARATOR) + 1


def descendant_prefix(path: str) -> str:
    return path + SEPARATOR


def is_descendant(candidate: str, ancestor: str) -> bool:
    return candidate.startswith(descendant_prefix(ancestor))


def is_child(candidate: str, parent: str) -> bool:
    return is_descendant(candidate, parent) and depth(candidate) == depth(parent) + 1


def child_path(new_parent: str, old_parent: str, old_child_path: str) -> str:
    """Rewrite a descendant path after its ancestor moved, keeping the suffix as-is."""
    if not is_descendant(old_child_path, old_parent):
        raise ValueError(f"{old_child_path!r} is not below {old_parent!r}")
    return new_parent + old_child_path[len(old_parent):]


def parent_path(path: str) -> str:
    if is_root(path):
        return ROOT
    return path.rsplit(SEPARATOR, 1)[0]


def basename(path: str) -> str:
    return path.rsplit(SEPARATOR, 1)[-1]
