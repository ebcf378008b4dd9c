import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Mapping, Optional, Protocol

from .. import config
from ..exceptions import (
    DateComponentParseError,
    DateTagsNotFoundError,
    FilenameDateNotFoundError,
    MetadataRecordError,
    MetadataUnavailableError,
    RecordCountMismatchError,
    TimezoneParseError,
)
from ..models import MediaFileEntry, MetadataRecord, RenameConfig, ResolvedDate, SourceTag
from .fields import FieldReader, build_datetime, is_digits, parse_component
from .timezone import parse_timezone


class MetadataProvider(Protocol):
    def extract(self, path: Path) -> List[MetadataRecord]:
        ...


# --- Metadata dates ---

def find_first_tag(fields: Mapping[str, Optional[str]], tags) -> Optional[str]:
    """Returns the value of the first tag present in `fields` (may be empty)."""
    for tag in tags:
        if tag in fields and fields[tag] is not None:
            return fields[tag]
    return None


def parse_exif_date(value: str, fields: Mapping[str, Optional[str]],
                    legacy_offset: bool = False) -> datetime:
    """
    Parses "YYYY:MM:DD HH:MM:SS[.fff][+HH:MM]".

    Without an inline offset the Offset* tags are consulted; with none of
    them present the date is taken as UTC.
    """
    reader = FieldReader(value.strip())
    raw = {}
    # (component, width, separator that precedes it)
    for component, width, sep in (('year', 4, ''), ('month', 2, ':'), ('day', 2, ':'),
                                  ('hour', 2, ' '), ('minute', 2, ':'), ('second', 2, ':')):
        if sep and not reader.literal(sep):
            raise DateComponentParseError(component, value, f"expected {sep!r} before {component}")
        chunk = reader.take(width)
        if chunk is None:
            raise DateComponentParseError(component, value, "truncated")
        raw[component] = parse_component(component, chunk)

    # exiftool prints an all-zero date for an unset QuickTime CreateDate
    if not any(raw.values()):
        raise DateComponentParseError("year", value, "exiftool's unset-date value, no capture date recorded")

    microsecond = 0
    if reader.literal('.'):
        frac = reader.digit_run()
        if not frac or len(frac) > 6:
            raise DateComponentParseError("millisecond", value)
        microsecond = int(frac.ljust(6, '0'))

    tz_string = reader.rest()
    if not tz_string:
        tz_string = find_first_tag(fields, config.OFFSET_TAGS) or ''

    tz = timezone.utc
    if tz_string:
        try:
            tz = parse_timezone(tz_string, legacy=legacy_offset)
        except TimezoneParseError as e:
            raise DateComponentParseError("timezone", tz_string, str(e)) from e

    return build_datetime(raw['year'], raw['month'], raw['day'],
                          raw['hour'], raw['minute'], raw['second'],
                          microsecond, tz)


def parse_comment_timestamp(comment: str) -> Optional[datetime]:
    """
    Finds "timestamp=<seconds>" in a comment and returns it in the local zone.
    """
    idx = comment.find(config.COMMENT_TIMESTAMP_KEY)
    while idx != -1:
        reader = FieldReader(comment, idx + len(config.COMMENT_TIMESTAMP_KEY))
        digits = reader.digit_run()
        if digits:
            try:
                return datetime.fromtimestamp(int(digits), tz=timezone.utc).astimezone()
            except (OverflowError, OSError, ValueError) as e:
                raise DateComponentParseError("timestamp", digits, str(e)) from e
        idx = comment.find(config.COMMENT_TIMESTAMP_KEY, idx + 1)
    return None


# --- Filename dates ---

def find_date_in_filename(filename: str) -> datetime:
    """
    Scans for YYYY?MM?DD?HH?MM?SS, where each '?' is at most one non-digit.

    The leftmost candidate with valid field values wins; the result is UTC.
    Raises FilenameDateNotFoundError if there is none.
    """
    for start in range(len(filename)):
        if not is_digits(filename[start]):
            continue
        candidate = _read_loose_date(filename, start)
        if candidate is not None:
            return candidate
    raise FilenameDateNotFoundError(f"date taken not found in original filename {filename!r}")


def _read_loose_date(text: str, start: int) -> Optional[datetime]:
    reader = FieldReader(text, start)
    values = []
    for i, width in enumerate((4, 2, 2, 2, 2, 2)):
        if i:
            reader.skip_separator()
        chunk = reader.digits(width)
        if chunk is None:
            return None
        values.append(int(chunk))
    try:
        return build_datetime(*values)
    except DateComponentParseError:
        # A run of digits that is not a date, keep scanning
        return None


# --- The chain ---

class DateResolver:
    """
    Picks the most trustworthy capture date for a file.

    Order: metadata date tag or comment timestamp (dt) -> date in the original
    filename (dn) -> filesystem modification time in UTC (dmz).
    """

    def __init__(self, provider: MetadataProvider, rename_config: RenameConfig):
        self.provider = provider
        self.config = rename_config

    def resolve(self, entry: MediaFileEntry, original_filename: str) -> ResolvedDate:
        try:
            return ResolvedDate(self.from_metadata(entry), SourceTag.METADATA)
        except MetadataUnavailableError as e:
            if self.config.strict_metadata and not isinstance(e, DateTagsNotFoundError):
                raise
            logging.debug(f"No metadata date for {entry.path}: {e}")

        try:
            return ResolvedDate(find_date_in_filename(original_filename), SourceTag.FILENAME)
        except FilenameDateNotFoundError as e:
            logging.debug(f"{e}; using modification time for {entry.path}")

        mtime = datetime.fromtimestamp(entry.mtime, tz=timezone.utc)
        return ResolvedDate(mtime, SourceTag.MTIME_UTC)

    def from_metadata(self, entry: MediaFileEntry) -> datetime:
        records = self.provider.extract(entry.path)
        if len(records) != 1:
            raise RecordCountMismatchError(entry.path, len(records))

        record = records[0]
        if record.error:
            raise MetadataRecordError(entry.path, record.error)

        value = find_first_tag(record.fields, config.DATE_TAGS)
        if value:
            return parse_exif_date(value, record.fields, self.config.legacy_offset_arithmetic)

        comment = record.fields.get(config.COMMENT_TAG)
        if comment:
            dt = parse_comment_timestamp(comment)
            if dt is not None:
                return dt

        raise DateTagsNotFoundError(f"date taken not found in metadata of {entry.path}")
