"""
Shared building blocks for the fixed-width date grammars.

FieldReader is a cursor over a string; build_datetime turns the numeric
fields into an aware datetime, naming the first component that is out of range.
"""
import calendar
from datetime import datetime, timezone, tzinfo
from typing import Optional

from ..exceptions import DateComponentParseError


def is_digits(s: str) -> bool:
    return bool(s) and s.isascii() and s.isdigit()


def parse_component(component: str, text: str) -> int:
    if not is_digits(text):
        raise DateComponentParseError(component, text, "not a number")
    return int(text)


class FieldReader:
    def __init__(self, text: str, pos: int = 0):
        self.text = text
        self.pos = pos

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        return self.text[self.pos:self.pos + 1]

    def rest(self) -> str:
        return self.text[self.pos:]

    def literal(self, s: str) -> bool:
        """Consumes `s` if it comes next."""
        if self.text.startswith(s, self.pos):
            self.pos += len(s)
            return True
        return False

    def take(self, n: int) -> Optional[str]:
        """Consumes exactly n characters, or nothing if fewer remain."""
        if self.pos + n > len(self.text):
            return None
        chunk = self.text[self.pos:self.pos + n]
        self.pos += n
        return chunk

    def digits(self, n: int) -> Optional[str]:
        """Consumes exactly n ASCII digits, or nothing."""
        chunk = self.text[self.pos:self.pos + n]
        if len(chunk) != n or not is_digits(chunk):
            return None
        self.pos += n
        return chunk

    def digit_run(self) -> str:
        """Consumes the longest run of ASCII digits (possibly empty)."""
        start = self.pos
        while not self.at_end() and is_digits(self.peek()):
            self.pos += 1
        return self.text[start:self.pos]

    def skip_separator(self):
        """Consumes one non-digit character, if there is one."""
        if not self.at_end() and not is_digits(self.peek()):
            self.pos += 1


def build_datetime(year: int, month: int, day: int,
                   hour: int, minute: int, second: int,
                   microsecond: int = 0,
                   tz: Optional[tzinfo] = None) -> datetime:
    """
    Validates each field and returns an aware datetime (UTC unless `tz` is given).

    No normalization happens: month 13 or hour 24 is an error, not a rollover.
    """
    if not 1 <= year <= 9999:
        raise DateComponentParseError("year", str(year), "out of range")
    if not 1 <= month <= 12:
        raise DateComponentParseError("month", str(month), "out of range")
    if not 1 <= day <= calendar.monthrange(year, month)[1]:
        raise DateComponentParseError("day", str(day), "out of range")
    if not 0 <= hour <= 23:
        raise DateComponentParseError("hour", str(hour), "out of range")
    if not 0 <= minute <= 59:
        raise DateComponentParseError("minute", str(minute), "out of range")
    if not 0 <= second <= 59:
        raise DateComponentParseError("second", str(second), "out of range")
    if not 0 <= microsecond <= 999999:
        raise DateComponentParseError("millisecond", str(microsecond), "out of range")

    return datetime(year, month, day, hour, minute, second, microsecond,
                    tzinfo=tz if tz is not None else timezone.utc)
