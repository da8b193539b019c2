"""Option stores with dotted-path access and required/allowed key policies."""

from __future__ import annotations

import json
import logging
import os
import threading
from collections.abc import Mapping
from typing import Any, Callable, Iterator

from optiontree.errors import (
    CannotUnsetRequiredError,
    InvalidOptionsError,
    MissingRequiredOptionError,
    OptionAlreadySetError,
    OptionNotAllowedError,
    OptionNotFoundError,
)
from optiontree.loader import ConfigLoader, is_file_source
from optiontree.path import (
    NOT_FOUND,
    copy_tree,
    copy_value,
    exists,
    flatten,
    remove,
    resolve,
    write,
)

__all__ = ["OptionStore", "Config", "ChangeCallback"]

logger = logging.getLogger(__name__)

# Callable(path, old_value, new_value); old_value is NOT_FOUND for new keys.
ChangeCallback = Callable[[str, Any, Any], Any]

_NO_DEFAULT: Any = object()


class OptionStore:
    """A nested option tree guarded by required and allowed key lists.

    The tree structure (mappings and lists) is copied on the way in and on
    the way out, so mutating a container passed to, or returned by, the
    store never changes the stored tree. Other values are stored by
    reference.

    Thread safety:
        Internally synchronized. The change callback runs on the calling
        thread after the lock is released; a callback that sets the same
        path again sees the value it was notified about as the old value.
    """

    def __init__(
        self,
        options: Mapping[str, Any] | None = None,
        on_change: ChangeCallback | None = None,
        *,
        required_options: list[str] | None = None,
        allowed_options: list[str] | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            options: Initial option tree, validated like set_options().
            on_change: Called as on_change(path, old, new) after set_option().
            required_options: Dotted paths every replacement tree must contain.
            allowed_options: If non-empty, the only paths get/set accept.
        """
        self._options: dict[str, Any] = {}
        self._required_options: list[str] = list(required_options or [])
        self._allowed_options: list[str] = list(allowed_options or [])
        self._on_change: ChangeCallback | None = on_change
        self._lock = threading.RLock()
        if options is not None:
            self.set_options(options)

    # ----- Policy -----

    @property
    def required_options(self) -> list[str]:
        """Dotted paths that must resolve in every set_options() tree."""
        with self._lock:
            return list(self._required_options)

    def set_required_options(self, required_options: list[str]) -> OptionStore:
        with self._lock:
            self._required_options = list(required_options)
        return self

    @property
    def allowed_options(self) -> list[str]:
        """Whitelisted dotted paths; empty means everything is allowed."""
        with self._lock:
            return list(self._allowed_options)

    def set_allowed_options(self, allowed_options: list[str]) -> OptionStore:
        with self._lock:
            self._allowed_options = list(allowed_options)
        return self

    @property
    def on_change(self) -> ChangeCallback | None:
        return self._on_change

    @on_change.setter
    def on_change(self, callback: ChangeCallback | None) -> None:
        self._on_change = callback

    def _check_allowed(self, path: str) -> None:
        if self._allowed_options and path not in self._allowed_options:
            raise OptionNotAllowedError(path)

    # ----- Bulk access -----

    def set_options(self, options: Mapping[str, Any]) -> OptionStore:
        """Merge a tree into the store, replacing matching top-level keys.

        Nested keys are not merged: a top-level key present in options
        replaces the whole existing subtree. Top-level keys absent from
        options are kept. The change callback is not invoked.

        Raises:
            InvalidOptionsError: If options is not a mapping.
            MissingRequiredOptionError: If a required path does not resolve
                in options.
            OptionNotAllowedError: If a whitelist is active and a top-level
                key of options is not on it.
        """
        if not isinstance(options, Mapping):
            raise InvalidOptionsError(
                f"Options must be a mapping, got {type(options).__name__}"
            )

        with self._lock:
            for key in self._required_options:
                if not exists(options, key):
                    raise MissingRequiredOptionError(key)
            if self._allowed_options:
                for key in options:
                    if key not in self._allowed_options:
                        raise OptionNotAllowedError(key)
            self._options.update(copy_tree(options))

        logger.debug("Replaced %d top-level options", len(options))
        return self

    def get_options(self) -> dict[str, Any]:
        """Return a structural copy of the whole option tree."""
        with self._lock:
            return copy_tree(self._options)

    def list_options(self) -> dict[str, Any]:
        """Return every leaf option keyed by its dotted path."""
        with self._lock:
            return copy_tree(flatten(self._options))

    # ----- Single options -----

    def get_option(self, path: str, default: Any = _NO_DEFAULT) -> Any:
        """Get the value at a dotted path.

        Args:
            path: Dotted option path, e.g. ``"database.host"``.
            default: Returned when the path does not resolve. Any value,
                including None, counts as a supplied default.

        Raises:
            OptionNotAllowedError: If a whitelist is active and path is not on it.
            OptionNotFoundError: If the path does not resolve and no default
                was supplied.
        """
        with self._lock:
            self._check_allowed(path)
            value = resolve(self._options, path)
            if value is NOT_FOUND:
                if default is _NO_DEFAULT:
                    raise OptionNotFoundError(path)
                return default
            return copy_value(value)

    def get(self, path: str, default: Any = _NO_DEFAULT) -> Any:
        """Shorthand for get_option()."""
        return self.get_option(path, default)

    def set_option(self, path: str, value: Any, overwrite: bool = False) -> OptionStore:
        """Set the value at a dotted path, creating parent nodes as needed.

        Raises:
            OptionAlreadySetError: If the path resolves and overwrite is False.
            OptionNotAllowedError: If a whitelist is active and path is not on it.
        """
        with self._lock:
            if not overwrite and exists(self._options, path):
                raise OptionAlreadySetError(path)
            self._check_allowed(path)
            old_value = resolve(self._options, path)
            write(self._options, path, copy_value(value))
            callback = self._on_change

        logger.debug("Option '%s' set (overwrite=%s)", path, overwrite)
        if callback is not None:
            callback(path, old_value, value)
        return self

    def set(self, path: str, value: Any, overwrite: bool = False) -> OptionStore:
        """Shorthand for set_option()."""
        return self.set_option(path, value, overwrite)

    def unset_option(self, path: str) -> None:
        """Remove the entry at a dotted path; a missing path is a no-op.

        Only the addressed node is removed, its parent stays in place.

        Raises:
            CannotUnsetRequiredError: If path is a required option.
        """
        with self._lock:
            if not exists(self._options, path):
                return
            if path in self._required_options:
                raise CannotUnsetRequiredError(path)
            remove(self._options, path)
        logger.debug("Option '%s' unset", path)

    def has_option(self, path: str) -> bool:
        """Check whether a dotted path resolves. Ignores the whitelist."""
        with self._lock:
            return exists(self._options, path)

    def option_equals(self, path: str, value: Any) -> bool:
        """Check that path is set and its value compares equal to value."""
        return self.has_option(path) and self.get_option(path) == value

    # ----- Introspection -----

    def __len__(self) -> int:
        with self._lock:
            return len(self._options)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            keys = list(self._options)
        return iter(keys)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={list(self)!r})"


class Config(OptionStore):
    """An OptionStore that loads from mappings, JSON text or files.

    Usage::

        cfg = Config("settings.yaml", required_options=["database.host"])
        cfg["database.port"] = 5432
        host = cfg["database.host"]
    """

    def __init__(
        self,
        source: Any = None,
        on_change: ChangeCallback | None = None,
        *,
        required_options: list[str] | None = None,
        allowed_options: list[str] | None = None,
        loader: ConfigLoader | None = None,
    ) -> None:
        self._loader = loader if loader is not None else ConfigLoader()
        self._file: str | None = None
        super().__init__(
            source,
            on_change,
            required_options=required_options,
            allowed_options=allowed_options,
        )

    @property
    def file(self) -> str | None:
        """Path of the last file options were loaded from, if any."""
        return self._file

    def set_options(self, source: Any) -> Config:
        """Load source and merge it like OptionStore.set_options().

        Raises:
            FileUnreadableError: If source names an unreadable file.
            UnsupportedFileTypeError: If the file extension is not supported.
            JsonSyntaxError: If source is malformed JSON text.
        """
        if isinstance(source, Mapping):
            super().set_options(source)
            return self

        options = self._loader.load(source)
        super().set_options(options)
        if is_file_source(source):
            self._file = os.fspath(source)
        return self

    def to_json(self, indent: int | None = None) -> str:
        """Serialize the option tree as JSON."""
        return json.dumps(self.get_options(), indent=indent)

    # ----- Item access -----

    def __getitem__(self, path: str) -> Any:
        return self.get_option(path)

    def __setitem__(self, path: str, value: Any) -> None:
        self.set_option(path, value)

    def __delitem__(self, path: str) -> None:
        self.unset_option(path)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        return self.has_option(path)
