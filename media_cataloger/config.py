"""
Configuration constants for the media cataloger.
"""
import re
from datetime import timedelta

# --- File Type Definitions ---
IMAGE_EXTS = frozenset({'heic', 'jpeg', 'jpg', 'gif', 'png'})
VIDEO_EXTS = frozenset({'3gp', 'm4v', 'mov', 'mp4', 'mpg', 'mpo'})

# Compared against MediaFileEntry.ext, which is already lower-cased and has no dot
SUPPORTED_EXTS = IMAGE_EXTS | VIDEO_EXTS

# --- Metadata Parsing ---
# Priority order matters: first present tag wins.
DATE_TAGS = (
    'CreateDate',
    'DateTimeOriginal',
    'CreationDate',
    'MediaCreateDate',
)

OFFSET_TAGS = (
    'OffsetTimeOriginal',
    'OffsetTimeDigitized',
    'OffsetTime',
)

COMMENT_TAG = 'Comment'
COMMENT_TIMESTAMP_KEY = 'timestamp='

# -n = no print conversion, same as the one-shot exiftool call used elsewhere
EXIFTOOL_COMMON_ARGS = ['-n', '-charset', 'filename=utf8']

# --- Defaults (CLI) ---
DEFAULT_TIMEZONE_CUSTOM = '00:00'
DEFAULT_MAX_DATES_DISTANCE = '26h'

# --- Durations ---
# Go-style duration strings: "26h", "1h30m", "1.5h", "250ms", "-90s"
_DURATION_UNITS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'ms': 1e-3,
    's': 1.0,
    'm': 60.0,
    'h': 3600.0,
}
_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)')


def parse_duration(text: str) -> timedelta:
    """
    Parses a Go-style duration string into a timedelta.

    Raises ValueError for anything that is not a sequence of
    <number><unit> pairs (a bare "0" is accepted).
    """
    s = text.strip()
    sign = 1
    if s[:1] in ('+', '-'):
        if s[0] == '-':
            sign = -1
        s = s[1:]

    if s == '0':
        return timedelta(0)
    if not s:
        raise ValueError(f"invalid duration {text!r}")

    seconds = 0.0
    pos = 0
    while pos < len(s):
        m = _DURATION_PART.match(s, pos)
        if not m:
            raise ValueError(f"invalid duration {text!r}")
        seconds += float(m.group(1)) * _DURATION_UNITS[m.group(2)]
        pos = m.end()

    return timedelta(seconds=sign * seconds)
