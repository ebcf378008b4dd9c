"""
Custom exception hierarchy for the media cataloger.

Recoverable errors (MetadataUnavailableError, FilenameDateNotFoundError) are
absorbed by the date resolution chain. Everything else aborts the walk.
"""
from pathlib import Path
from typing import Optional


class MediaCatalogerError(Exception):
    """Base exception for all media cataloger errors."""
    pass


class ConfigError(MediaCatalogerError):
    """Raised when a configuration value is invalid."""
    pass


# --- Metadata ---

class MetadataUnavailableError(MediaCatalogerError):
    """No usable date could be taken from the metadata provider."""
    pass


class RecordCountMismatchError(MetadataUnavailableError):
    """The provider returned more or fewer than one record for a file."""

    def __init__(self, path: Path, count: int):
        super().__init__(f"expected 1 metadata record for {path}, got {count}")
        self.path = path
        self.count = count


class MetadataRecordError(MetadataUnavailableError):
    """The provider attached an error to the record of a file."""

    def __init__(self, path: Path, error: str):
        super().__init__(f"metadata error for {path}: {error}")
        self.path = path
        self.error = error


class DateTagsNotFoundError(MetadataUnavailableError):
    """Neither a date tag nor a comment timestamp was present."""
    pass


class MetadataExtractionError(MediaCatalogerError):
    """Raised when the metadata tool itself fails (not started, crashed)."""
    pass


class ProviderTeardownError(MetadataExtractionError):
    """Raised when the metadata tool cannot be shut down cleanly."""
    pass


# --- Dates ---

class FilenameDateNotFoundError(MediaCatalogerError):
    """The original filename carries no recognizable date."""
    pass


class DateComponentParseError(MediaCatalogerError):
    """A date field was malformed or out of range."""

    def __init__(self, component: str, value: str, reason: Optional[str] = None):
        msg = f"parse {component}: {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)
        self.component = component
        self.value = value


class TimezoneParseError(MediaCatalogerError):
    """Raised when a fixed-offset timezone string is malformed."""
    pass


# --- Processing ---

class EntryProcessingError(MediaCatalogerError):
    """Wraps a fatal error with the file and stage it happened in."""

    def __init__(self, path: Path, stage: str, cause: Exception):
        super().__init__(f"{stage} failed for {path}: {cause}")
        self.path = path
        self.stage = stage


class RenameExecutionError(MediaCatalogerError):
    """Raised when renaming a file fails. The walk must stop."""

    def __init__(self, operation: str, src: Path, dest: Path, reason: str):
        super().__init__(f"{operation}: {src} -> {dest}: {reason}")
        self.operation = operation
        self.src = src
        self.dest = dest
