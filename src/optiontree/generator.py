"""Build default option trees from explicit key declarations.

Keys are registered on a DefaultsGenerator, either one by one or from a
manifest file::

    keys:
      - key: database.host
        default: localhost
        description: Database server host name
      - key: database.port
        default: 5432

The generator is an ordinary object: every call site owns its own
accumulator, so independent generations never see each other's keys.
"""

from __future__ import annotations

import json
import logging
import os
from numbers import Number
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from optiontree.config import Config
from optiontree.errors import InvalidOptionsError, InvalidPathError
from optiontree.loader import load_file
from optiontree.path import copy_tree, merge, split_path

__all__ = ["KeyDescriptor", "KeyManifest", "DefaultsGenerator"]

logger = logging.getLogger(__name__)


class KeyDescriptor(BaseModel):
    """A dotted option key with its default value and description."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    default: Any = None
    description: str = ""

    @field_validator("key")
    @classmethod
    def check_key(cls, v: str) -> str:
        try:
            split_path(v)
        except InvalidPathError as e:
            raise ValueError(e.message) from e
        return v

    def to_tree(self, value: Any) -> dict[str, Any]:
        """Nest value under this descriptor's dotted key."""
        tree: Any = value
        for segment in reversed(split_path(self.key)):
            tree = {segment: tree}
        return tree

    def default_tree(self) -> dict[str, Any]:
        return self.to_tree(self.default)

    def description_tree(self) -> dict[str, Any]:
        return self.to_tree(self.description)

    def __str__(self) -> str:
        if isinstance(self.default, Number) and not isinstance(self.default, bool):
            line = f'"{self.key}" => {self.default},'
        else:
            default = "" if self.default is None else self.default
            line = f'"{self.key}" => "{default}"'
        if self.description:
            line = f"{line} // {self.description}"
        return line


class KeyManifest(BaseModel):
    """Top-level structure of a key manifest file."""

    model_config = ConfigDict(extra="forbid")

    keys: list[KeyDescriptor]


class DefaultsGenerator:
    """Accumulates key descriptors and renders them as option trees."""

    def __init__(self) -> None:
        self._descriptors: list[KeyDescriptor] = []
        self._context: list[tuple[str | None, str]] = []

    @property
    def descriptors(self) -> list[KeyDescriptor]:
        """Registered descriptors in registration order."""
        return list(self._descriptors)

    @property
    def context(self) -> list[tuple[str | None, str]]:
        """(source, key) pairs recording where each key was declared."""
        return list(self._context)

    def add(self, descriptor: KeyDescriptor, source: str | None = None) -> DefaultsGenerator:
        self._descriptors.append(descriptor)
        self._context.append((source, descriptor.key))
        return self

    def key(
        self,
        key: str,
        default: Any = None,
        description: str = "",
        source: str | None = None,
    ) -> DefaultsGenerator:
        """Declare a key in place. Raises InvalidPathError for a malformed key."""
        split_path(key)
        return self.add(
            KeyDescriptor(key=key, default=default, description=description),
            source=source,
        )

    def extend(
        self, descriptors: Iterable[KeyDescriptor], source: str | None = None
    ) -> DefaultsGenerator:
        for descriptor in descriptors:
            self.add(descriptor, source=source)
        return self

    def load_manifest(self, path: str | os.PathLike[str]) -> int:
        """Register every key declared in a YAML or JSON manifest file.

        Returns:
            Number of keys registered from the manifest.

        Raises:
            InvalidOptionsError: If the manifest structure is invalid.
        """
        data = load_file(path)
        try:
            manifest = KeyManifest.model_validate(data)
        except ValidationError as e:
            raise InvalidOptionsError(f"Invalid key manifest {path}: {e}") from e

        self.extend(manifest.keys, source=os.fspath(path))
        logger.debug("Registered %d keys from manifest %s", len(manifest.keys), path)
        return len(manifest.keys)

    def defaults(self) -> dict[str, Any]:
        """Merge every default into one tree; later declarations win."""
        tree: dict[str, Any] = {}
        for descriptor in self._descriptors:
            tree = merge(tree, descriptor.default_tree())
        return copy_tree(tree)

    def descriptions(self) -> dict[str, Any]:
        """Merge every description into one tree; later declarations win."""
        tree: dict[str, Any] = {}
        for descriptor in self._descriptors:
            tree = merge(tree, descriptor.description_tree())
        return copy_tree(tree)

    def to_json(self, indent: int | None = 4) -> str:
        """Render the default tree as JSON text."""
        return json.dumps(self.defaults(), indent=indent)

    def to_config(self, **kwargs: Any) -> Config:
        """Create a Config seeded with the default tree."""
        return Config(self.defaults(), **kwargs)
