"""Turn configuration sources into plain option trees.

A source is one of:

1. a mapping, copied as-is;
2. a path (``str`` or ``os.PathLike``) to a ``.json``, ``.yaml``/``.yml``
   or ``.py`` file;
3. any other string, parsed as JSON text.

A string that does not name an existing filesystem entry is always treated
as JSON text, so a mistyped file name surfaces as a JsonSyntaxError.
"""

from __future__ import annotations

import importlib.util
import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Callable, Union

import yaml

from optiontree.errors import (
    FileUnreadableError,
    InvalidOptionsError,
    JsonSyntaxError,
    UnsupportedFileTypeError,
)
from optiontree.path import copy_tree

__all__ = [
    "ConfigLoader",
    "OptionSource",
    "SUPPORTED_EXTENSIONS",
    "is_file_source",
    "load_file",
    "load_json",
    "load_options",
]

logger = logging.getLogger(__name__)

OptionSource = Union[Mapping[str, Any], str, os.PathLike]

# Name of the module-level variable a ``.py`` options file must define.
PYTHON_OPTIONS_ATTRIBUTE = "OPTIONS"


def is_file_source(source: Any) -> bool:
    """Check whether source would be loaded from the filesystem."""
    if isinstance(source, os.PathLike):
        return True
    return isinstance(source, str) and os.path.exists(source)


def load_options(source: Any) -> dict[str, Any]:
    """Load an option tree from any supported source.

    Raises:
        InvalidOptionsError: If source is of an unsupported type or does not
            produce a mapping.
        FileUnreadableError: If source names a directory or unreadable file.
        UnsupportedFileTypeError: If the file extension is not supported.
        JsonSyntaxError: If JSON text cannot be decoded.
    """
    if isinstance(source, Mapping):
        return copy_tree(source)
    if is_file_source(source):
        return load_file(source)
    if isinstance(source, str):
        return load_json(source)
    raise InvalidOptionsError(
        f"Options must be a mapping, a JSON string or a file path, got {type(source).__name__}"
    )


def load_json(text: str) -> dict[str, Any]:
    """Decode JSON text whose top-level value is an object."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        detail = f"{e.msg} (line {e.lineno}, column {e.colno})"
        raise JsonSyntaxError(detail) from e
    return _ensure_mapping(data, "JSON document")


def load_file(path: str | os.PathLike[str]) -> dict[str, Any]:
    """Load an option tree from a file, dispatching on its extension."""
    file_path = Path(path)
    if not file_path.exists():
        raise FileUnreadableError(path=str(file_path), reason="No such file")
    if file_path.is_dir():
        raise FileUnreadableError(path=str(file_path), reason="Is a directory")
    if not os.access(file_path, os.R_OK):
        raise FileUnreadableError(path=str(file_path), reason="Permission denied")

    extension = file_path.suffix.lstrip(".").lower()
    file_loader = _FILE_LOADERS.get(extension)
    if file_loader is None:
        raise UnsupportedFileTypeError(extension)
    options = file_loader(file_path)

    logger.debug("Loaded %d top-level options from %s", len(options), file_path)
    return options


def _read_text(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileUnreadableError(path=str(file_path), reason=str(e)) from e


def _load_json_file(file_path: Path) -> dict[str, Any]:
    return load_json(_read_text(file_path))


def _load_yaml(file_path: Path) -> dict[str, Any]:
    """Parse a YAML options file. An empty document yields an empty tree."""
    try:
        data = yaml.safe_load(_read_text(file_path))
    except yaml.YAMLError as e:
        raise InvalidOptionsError(f"Invalid YAML in {file_path}: {e}") from e
    if data is None:
        return {}
    return _ensure_mapping(data, f"YAML file {file_path}")


def _load_python(file_path: Path) -> dict[str, Any]:
    """Execute a Python options file and return its OPTIONS mapping."""
    module_name = f"optiontree_options_{file_path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, str(file_path))
    if spec is None or spec.loader is None:
        raise FileUnreadableError(
            path=str(file_path), reason="Cannot create import spec"
        )

    mod = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(mod)
    except (ImportError, OSError) as e:
        raise FileUnreadableError(path=str(file_path), reason=str(e)) from e
    except Exception as e:
        raise InvalidOptionsError(f"Failed to evaluate {file_path}: {e}") from e

    if not hasattr(mod, PYTHON_OPTIONS_ATTRIBUTE):
        raise InvalidOptionsError(
            f"Python options file {file_path} does not define '{PYTHON_OPTIONS_ATTRIBUTE}'"
        )
    return _ensure_mapping(
        getattr(mod, PYTHON_OPTIONS_ATTRIBUTE), f"Python file {file_path}"
    )


def _ensure_mapping(data: Any, origin: str) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidOptionsError(
            f"{origin} must contain a mapping, got {type(data).__name__}"
        )
    return copy_tree(data)


_FILE_LOADERS: dict[str, Callable[[Path], dict[str, Any]]] = {
    "json": _load_json_file,
    "yaml": _load_yaml,
    "yml": _load_yaml,
    "py": _load_python,
}

SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(_FILE_LOADERS)


class ConfigLoader:
    """Loads option trees and remembers the last file read.

    Stateless apart from ``last_file``; one instance may be shared by
    several stores that are used from the same thread.
    """

    def __init__(self) -> None:
        self.last_file: str | None = None

    def load(self, source: Any) -> dict[str, Any]:
        """Load source, recording its path when it is a file."""
        options = load_options(source)
        if is_file_source(source):
            self.last_file = os.fspath(source)
        return options
