"""
Fixed-offset timezone parsing and the custom-timezone normalization step.
"""
import logging
from datetime import timedelta, timezone

from ..exceptions import TimezoneParseError
from ..models import RenameConfig, ResolvedDate, SourceTag, TimezoneSource
from .fields import FieldReader

_MAX_OFFSET = timedelta(hours=24)


def parse_timezone(spec: str, legacy: bool = False) -> timezone:
    """
    Parses "[+|-]HH:MM" into a fixed UTC offset.

    By default the offset is sign * (HH * 60 + MM) minutes.

    With `legacy=True`, archives renamed by the original tool can be reproduced
    exactly: it computed sign * HH * 60 * MM *seconds*, so "+02:00" became UTC
    and "+05:30" became +2:30. Only use this when existing filenames depend on it.
    """
    reader = FieldReader(spec)

    sign = 1
    if reader.literal('-'):
        sign = -1
    else:
        reader.literal('+')

    hours = reader.digits(2)
    if hours is None or not reader.literal(':'):
        raise TimezoneParseError(f"parse timezone hour: {spec!r}")
    minutes = reader.digits(2)
    if minutes is None or not reader.at_end():
        raise TimezoneParseError(f"parse timezone minute: {spec!r}")

    if legacy:
        offset = timedelta(seconds=sign * int(hours) * 60 * int(minutes))
    else:
        offset = sign * timedelta(hours=int(hours), minutes=int(minutes))

    if not -_MAX_OFFSET < offset < _MAX_OFFSET:
        raise TimezoneParseError(f"timezone offset out of range: {spec!r}")

    return timezone(offset, spec)


def apply_timezone(resolved: ResolvedDate, config: RenameConfig) -> ResolvedDate:
    """Moves the date into the custom offset when the config asks for it."""
    if config.timezone_source != TimezoneSource.CUSTOM:
        return resolved

    source = resolved.source
    if source == SourceTag.MTIME_UTC:
        # Filesystem time now follows the user's declared offset
        source = SourceTag.MTIME_CUSTOM

    value = resolved.value.astimezone(config.timezone_custom)
    logging.debug(f"Timezone {config.timezone_custom_str}: {resolved.value.isoformat()} -> {value.isoformat()}")
    return ResolvedDate(value=value, source=source)
