"""Dotted-path navigation over nested option mappings.

A dotted path such as ``"database.primary.host"`` addresses one node of an
option tree, one segment per nesting level. There is no escaping: a ``.``
is always a separator.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from optiontree.errors import InvalidPathError

__all__ = [
    "NOT_FOUND",
    "split_path",
    "resolve",
    "exists",
    "write",
    "remove",
    "flatten",
    "copy_tree",
    "copy_value",
    "merge",
]


class _NotFound:
    """Marker returned by resolve() when a path does not resolve."""

    _instance: _NotFound | None = None

    def __new__(cls) -> _NotFound:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _NotFound:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _NotFound:
        return self


NOT_FOUND: Any = _NotFound()


def split_path(path: str) -> list[str]:
    """Split a dotted path into its segments.

    Raises:
        InvalidPathError: If path is not a string, is empty, or contains an
            empty segment (leading, trailing or doubled dots).
    """
    if not isinstance(path, str) or not path:
        raise InvalidPathError(path)
    segments = path.split(".")
    if any(segment == "" for segment in segments):
        raise InvalidPathError(path)
    return segments


def resolve(tree: Mapping[str, Any], path: str) -> Any:
    """Return the value at path, or NOT_FOUND.

    Descending through a scalar leaf yields NOT_FOUND rather than an error.
    """
    current: Any = tree
    for segment in split_path(path):
        if not isinstance(current, Mapping) or segment not in current:
            return NOT_FOUND
        current = current[segment]
    return current


def exists(tree: Mapping[str, Any], path: str) -> bool:
    """Check whether path resolves in tree."""
    return resolve(tree, path) is not NOT_FOUND


def write(tree: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set the value at path, creating intermediate nodes as needed.

    Missing intermediates become empty dicts. An intermediate that holds a
    non-mapping value is replaced by an empty dict.
    """
    segments = split_path(path)
    current: MutableMapping[str, Any] = tree
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, MutableMapping):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value


def remove(tree: MutableMapping[str, Any], path: str) -> bool:
    """Delete the entry at path from its parent node.

    Returns:
        True if an entry was removed, False if the path did not resolve.
    """
    segments = split_path(path)
    parent = resolve(tree, ".".join(segments[:-1])) if len(segments) > 1 else tree
    if not isinstance(parent, MutableMapping) or segments[-1] not in parent:
        return False
    del parent[segments[-1]]
    return True


def copy_tree(tree: Mapping[str, Any]) -> dict[str, Any]:
    """Copy the structure of tree, turning every mapping node into a plain dict.

    Lists are copied element by element; any other leaf is kept by
    reference, so opaque objects (locks, clients, handles) keep their
    identity and need not support copying.
    """
    return {key: copy_value(value) for key, value in tree.items()}


def copy_value(value: Any) -> Any:
    """Copy value the way copy_tree() copies a leaf."""
    if isinstance(value, Mapping):
        return copy_tree(value)
    if isinstance(value, list):
        return [copy_value(item) for item in value]
    return value


def flatten(tree: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Map every leaf of tree to its dotted path.

    Empty mappings count as leaves so that they survive a round trip.
    """
    flat: dict[str, Any] = {}
    for key, value in tree.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping) and value:
            flat.update(flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


def merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base.

    Mapping nodes present on both sides are merged key by key; any other
    value in override replaces the one in base.
    """
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, Mapping) and isinstance(value, Mapping):
            merged[key] = merge(existing, value)
        else:
            merged[key] = value
    return merged
