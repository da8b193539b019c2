"""Error hierarchy for the optiontree package."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

__all__ = [
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
    "ErrorCodes",
]


class ConfigurationError(Exception):
    """Base error for all optiontree errors."""

    def __init__(
        self,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details: dict[str, Any] = details or {}
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class _KeyError(ConfigurationError):
    """Shared base for errors that name a single option key."""

    @property
    def key(self) -> str:
        """The dotted option key the error refers to."""
        return self.details["key"]


class MissingRequiredOptionError(_KeyError):
    """Raised when a required option is absent from a replacement tree."""

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(
            code="MISSING_REQUIRED_OPTION",
            message=f'Required option "{key}" is missing',
            details={"key": key},
            **kwargs,
        )


class OptionNotAllowedError(_KeyError):
    """Raised when a whitelist is active and the key is outside it."""

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(
            code="OPTION_NOT_ALLOWED",
            message=f'Option "{key}" not allowed',
            details={"key": key},
            **kwargs,
        )


class OptionNotFoundError(_KeyError):
    """Raised when an option is absent and no default value was provided."""

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(
            code="OPTION_NOT_FOUND",
            message=f'Option "{key}" not found and no default value provided',
            details={"key": key},
            **kwargs,
        )


class OptionAlreadySetError(_KeyError):
    """Raised when setting an existing option without overwrite."""

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(
            code="OPTION_ALREADY_SET",
            message=f'Option "{key}" already set',
            details={"key": key},
            **kwargs,
        )


class CannotUnsetRequiredError(_KeyError):
    """Raised when unsetting an option listed as required."""

    def __init__(self, key: str, **kwargs: Any) -> None:
        super().__init__(
            code="CANNOT_UNSET_REQUIRED",
            message=f'Cannot unset a required option "{key}"',
            details={"key": key},
            **kwargs,
        )


class UnsupportedFileTypeError(ConfigurationError):
    """Raised when a configuration file has an extension no loader handles."""

    def __init__(self, extension: str, **kwargs: Any) -> None:
        super().__init__(
            code="UNSUPPORTED_FILE_TYPE",
            message=f'Filetype "*.{extension}" not supported',
            details={"extension": extension},
            **kwargs,
        )

    @property
    def extension(self) -> str:
        """The rejected file extension, without the leading dot."""
        return self.details["extension"]


class FileUnreadableError(ConfigurationError):
    """Raised when a configuration file exists but cannot be read."""

    def __init__(self, path: str, reason: str = "", **kwargs: Any) -> None:
        message = f'Could not open "{path}" as file'
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            code="FILE_UNREADABLE",
            message=message,
            details={"path": path, "reason": reason},
            **kwargs,
        )

    @property
    def path(self) -> str:
        """The path that could not be read."""
        return self.details["path"]


class JsonSyntaxError(ConfigurationError):
    """Raised when JSON text cannot be decoded."""

    def __init__(self, detail: str, **kwargs: Any) -> None:
        super().__init__(
            code="JSON_SYNTAX_ERROR",
            message=f"Json error - Syntax error, malformed JSON: {detail}",
            details={"detail": detail},
            **kwargs,
        )


class InvalidOptionsError(ConfigurationError):
    """Raised when a source does not produce an option mapping."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(code="OPTIONS_INVALID", message=message, **kwargs)


class InvalidPathError(ConfigurationError):
    """Raised for an empty dotted path or one with empty segments."""

    def __init__(self, path: Any, **kwargs: Any) -> None:
        super().__init__(
            code="INVALID_PATH",
            message=f"Invalid option path: {path!r}",
            details={"path": path},
            **kwargs,
        )


class ErrorCodes:
    """All optiontree error codes as constants.

    Example:
        if error.code == ErrorCodes.OPTION_NOT_FOUND:
            use_fallback()
    """

    MISSING_REQUIRED_OPTION = "MISSING_REQUIRED_OPTION"
    OPTION_NOT_ALLOWED = "OPTION_NOT_ALLOWED"
    OPTION_NOT_FOUND = "OPTION_NOT_FOUND"
    OPTION_ALREADY_SET = "OPTION_ALREADY_SET"
    CANNOT_UNSET_REQUIRED = "CANNOT_UNSET_REQUIRED"
    UNSUPPORTED_FILE_TYPE = "UNSUPPORTED_FILE_TYPE"
    FILE_UNREADABLE = "FILE_UNREADABLE"
    JSON_SYNTAX_ERROR = "JSON_SYNTAX_ERROR"
    OPTIONS_INVALID = "OPTIONS_INVALID"
    INVALID_PATH = "INVALID_PATH"

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("ErrorCodes is immutable")
