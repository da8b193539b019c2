"""optiontree - Hierarchical configuration store with dotted-path access."""

from __future__ import annotations

# Stores
from optiontree.config import ChangeCallback, Config, OptionStore

# Loading
from optiontree.loader import SUPPORTED_EXTENSIONS, ConfigLoader, load_options

# Paths
from optiontree.path import NOT_FOUND

# Default generation
from optiontree.generator import DefaultsGenerator, KeyDescriptor

# Errors
from optiontree.errors import (
    CannotUnsetRequiredError,
    ConfigurationError,
    ErrorCodes,
    FileUnreadableError,
    InvalidOptionsError,
    InvalidPathError,
    JsonSyntaxError,
    MissingRequiredOptionError,
    OptionAlreadySetError,
    OptionNotAllowedError,
    OptionNotFoundError,
    UnsupportedFileTypeError,
)

__version__ = "0.1.0"

__all__ = [
    # Stores
    "OptionStore",
    "Config",
    "ChangeCallback",
    # Loading
    "ConfigLoader",
    "load_options",
    "SUPPORTED_EXTENSIONS",
    # Paths
    "NOT_FOUND",
    # Default generation
    "DefaultsGenerator",
    "KeyDescriptor",
    # Errors
    "ErrorCodes",
    "ConfigurationError",
    "MissingRequiredOptionError",
    "OptionNotAllowedError",
    "OptionNotFoundError",
    "OptionAlreadySetError",
    "CannotUnsetRequiredError",
    "UnsupportedFileTypeError",
    "FileUnreadableError",
    "JsonSyntaxError",
    "InvalidOptionsError",
    "InvalidPathError",
]
