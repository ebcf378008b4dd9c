"""
Canonical filename codec.

Grammar (fixed widths, literal separators):

    YYYY.MM.DD HH.MM.SS[.tag] (original)

Seconds may also be the literal "xy", written by early versions of the tool
and read back as 00.
"""
from datetime import datetime
from typing import Optional

from ..models import ParsedFilename, SourceTag
from ..dating.fields import FieldReader, build_datetime, parse_component

LEGACY_SECONDS = 'xy'

# (component, width, separator that follows)
_DATE_FIELDS = (
    ('year', 4, '.'),
    ('month', 2, '.'),
    ('day', 2, ' '),
    ('hour', 2, '.'),
    ('minute', 2, '.'),
    ('second', 2, ''),
)


def _is_tag_char(c: str) -> bool:
    return c.isascii() and c.isalnum()


def _read_shape(stem: str) -> Optional[tuple]:
    """
    Splits a stem into its raw fields if it has the canonical shape.

    Returns (fields, tag, original) or None. Fields are not validated here.
    """
    reader = FieldReader(stem)
    fields = {}
    for component, width, sep in _DATE_FIELDS:
        # Seconds are read loosely so a bad value is reported, not ignored
        if component == 'second':
            chunk = reader.take(width)
        else:
            chunk = reader.digits(width)
        if chunk is None:
            return None
        fields[component] = chunk
        if sep and not reader.literal(sep):
            return None

    tag = None
    if reader.literal('.'):
        start = reader.pos
        while not reader.at_end() and _is_tag_char(reader.peek()):
            reader.pos += 1
        tag = stem[start:reader.pos]
        if not tag:
            return None

    if not reader.literal(' (') or not stem.endswith(')'):
        return None
    original = stem[reader.pos:-1]

    return fields, tag, original


def decode(stem: str) -> ParsedFilename:
    """
    Extracts the original filename and the previously encoded date.

    A stem without the canonical shape is returned whole with no prior date.
    A stem with the shape but a malformed field raises DateComponentParseError.
    """
    shape = _read_shape(stem)
    if shape is None:
        return ParsedFilename(original_filename=stem, prior_date=None)

    fields, _tag, original = shape
    if fields['second'] == LEGACY_SECONDS:
        fields['second'] = '00'

    values = {name: parse_component(name, raw) for name, raw in fields.items()}
    prior = build_datetime(values['year'], values['month'], values['day'],
                           values['hour'], values['minute'], values['second'])

    return ParsedFilename(original_filename=original, prior_date=prior)


def encode(date: datetime, source: SourceTag, original_filename: str) -> str:
    """Renders the canonical stem using the date's own wall-clock fields."""
    tag = source.value if isinstance(source, SourceTag) else str(source)
    return (
        f"{date.year:04d}.{date.month:02d}.{date.day:02d} "
        f"{date.hour:02d}.{date.minute:02d}.{date.second:02d}.{tag} "
        f"({original_filename})"
    )
