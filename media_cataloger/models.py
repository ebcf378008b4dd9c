from dataclasses import dataclass
from datetime import datetime, timedelta, tzinfo
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from . import config


class SourceTag(str, Enum):
    """Which fallback tier produced a resolved date."""
    METADATA = 'dt'
    FILENAME = 'dn'
    MTIME_UTC = 'dmz'
    MTIME_CUSTOM = 'dm'


class DecisionKind(str, Enum):
    SKIP_UNSUPPORTED = 'skip-unsupported'
    ALREADY_CORRECT = 'already-correct'
    WARN_DRIFT_SKIP = 'warn-drift-skip'
    PRINT_ONLY = 'print-only'
    EXECUTE = 'execute'


class Action(str, Enum):
    PRINT = 'print'
    EXECUTE = 'execute'


class TimezoneSource(str, Enum):
    MEDIA = 'media'
    CUSTOM = 'custom'


@dataclass(frozen=True)
class MediaFileEntry:
    """
    Represents a file found during the walk.
    """
    path: Path
    directory: Path
    stem: str               # base filename without extension
    ext: str                # lower-cased, no dot
    mtime: float            # POSIX seconds

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class ParsedFilename:
    original_filename: str
    # None = never canonicalized; drift checking is skipped
    prior_date: Optional[datetime] = None


@dataclass(frozen=True)
class ResolvedDate:
    value: datetime         # always timezone-aware
    source: SourceTag


@dataclass(frozen=True)
class MetadataRecord:
    """
    One record returned by the metadata provider for a single file.
    """
    path: Path
    fields: Dict[str, Optional[str]]
    error: Optional[str] = None


@dataclass(frozen=True)
class RenameConfig:
    timezone_source: TimezoneSource
    timezone_custom: tzinfo
    timezone_custom_str: str
    max_dates_distance: timedelta
    action: Action
    strict_metadata: bool = False
    legacy_offset_arithmetic: bool = False

    @property
    def max_dates_distance_ms(self) -> int:
        return int(self.max_dates_distance / timedelta(milliseconds=1))


@dataclass
class RenameDecision:
    kind: DecisionKind
    entry: MediaFileEntry
    new_filename: Optional[str] = None      # with extension
    new_path: Optional[Path] = None
    resolved: Optional[ResolvedDate] = None
    distance: Optional[timedelta] = None    # new minus prior, when a prior date exists

    @property
    def old_path(self) -> Path:
        return self.entry.path


@dataclass
class RenameStats:
    """
    Aggregate counters for one walk.

    `seen` runs as soon as the walker yields a file and `record` once its
    decision is known, so a file that aborts the walk is still counted as found.
    """
    total_files_found: int = 0
    total_media_found: int = 0
    total_media_ok_filenames: int = 0
    total_media_warnings: int = 0
    total_media_actions: int = 0

    def seen(self, entry: MediaFileEntry):
        self.total_files_found += 1
        if entry.ext in config.SUPPORTED_EXTS:
            self.total_media_found += 1

    def record(self, decision: RenameDecision):
        if decision.kind == DecisionKind.ALREADY_CORRECT:
            self.total_media_ok_filenames += 1
        elif decision.kind == DecisionKind.WARN_DRIFT_SKIP:
            self.total_media_warnings += 1
        elif decision.kind in (DecisionKind.PRINT_ONLY, DecisionKind.EXECUTE):
            self.total_media_actions += 1

    def summary_lines(self) -> List[str]:
        return [
            "Summary",
            f"totalFilesFound: {self.total_files_found}",
            f"totalMediaFound: {self.total_media_found}",
            f"totalMediaOkFilenames: {self.total_media_ok_filenames}",
            f"totalMediaWarnings: {self.total_media_warnings}",
            f"totalMediaActions: {self.total_media_actions}",
        ]
