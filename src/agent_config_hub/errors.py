"""Error types raised by the import and sync pipeline."""

from typing import Any, Dict, List, Optional


class HubError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ParseError(HubError):
    """A single entry or file could not be parsed.

    Parsers recover from this locally and report it as a string, it never
    escapes a parser call.
    """


class ConfigurationError(HubError):
    """Missing or invalid source/target path or installation layout."""


class NothingToSyncError(ConfigurationError):
    """The store holds no components that sync could render."""


class ImportValidationError(HubError):
    """At least one parsed entity failed validation, nothing was written."""

    def __init__(
        self,
        errors: List[str],
        preview: Optional[Dict[str, int]] = None,
        warnings: Optional[List[str]] = None,
    ):
        super().__init__(
            f"Validation failed with {len(errors)} error(s)",
            details=errors,
        )
        self.errors = errors
        self.preview = preview or {}
        self.warnings = warnings or []


class StorageError(HubError):
    """The relational store rejected a read or a transaction."""


class SnapshotError(StorageError):
    """A stored component payload could not be parsed into its entity."""

    def __init__(self, errors: List[str]):
        super().__init__(
            f"Failed to parse {len(errors)} stored component(s)", details=errors
        )
        self.errors = errors


class FileWriteError(HubError):
    """A single file could not be written during sync."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class ConflictError(HubError):
    """The operation conflicts with existing state."""


class NotFoundError(HubError):
    """The requested component does not exist."""


class InvalidComponentError(HubError):
    """A component payload sent to the CRUD operations failed validation."""

    def __init__(self, errors: List[str]):
        super().__init__(f"Invalid component: {'; '.join(errors)}", details=errors)
        self.errors = errors
