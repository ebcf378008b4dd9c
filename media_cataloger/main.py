import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import config
from .core import MediaCatalogerApp
from .dating.timezone import parse_timezone
from .exceptions import ConfigError, MediaCatalogerError
from .models import Action, RenameConfig, TimezoneSource


def setup_logging(log_file: Optional[Path], verbose: bool):
    """Sets up logging to the console and, optionally, to a file."""
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers
    )

    # Silence chatty libraries
    logging.getLogger("exiftool").setLevel(logging.WARNING)


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="media-cataloger",
        description="Rename media files according to their taken dates."
    )
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("rename", help="Rename media files according to their probable date taken")
    r.add_argument("media_dir", type=Path, help="Directory to rename media in")

    r.add_argument("-s", "--timezone-source", default=TimezoneSource.MEDIA.value,
                   choices=[s.value for s in TimezoneSource],
                   help='The source of timezone: "media" or "custom". Use --timezone-custom to set the custom timezone')
    r.add_argument("-z", "--timezone-custom", default=config.DEFAULT_TIMEZONE_CUSTOM,
                   help="Timezone for date in new filename, as [+|-]HH:MM")
    r.add_argument("-d", "--max-dates-distance", default=config.DEFAULT_MAX_DATES_DISTANCE,
                   help="Maximum time distance between date in old filename and date in new filename (e.g. 26h, 1h30m)")
    r.add_argument("-a", "--action", default=Action.PRINT.value,
                   choices=[a.value for a in Action],
                   help='Action to do with media: "print" or "execute" renaming')

    r.add_argument("--strict-metadata", action="store_true",
                   help="Abort when exiftool reports an error for a file instead of falling back")
    r.add_argument("--legacy-offset-arithmetic", action="store_true",
                   help="Reproduce the offset arithmetic of old archives (sign*HH*60*MM seconds)")

    r.add_argument("--log-file", type=Path, default=None, help="Also write the log to this file")
    r.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    r.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    return p.parse_args(argv)


def build_config(args) -> RenameConfig:
    """
    Validates the raw CLI values. Raises ConfigError or TimezoneParseError.
    """
    try:
        timezone_source = TimezoneSource(args.timezone_source)
    except ValueError:
        raise ConfigError(f"unknown timezone source {args.timezone_source!r}")

    try:
        action = Action(args.action)
    except ValueError:
        raise ConfigError(f"unknown action {args.action!r}")

    try:
        max_distance = config.parse_duration(args.max_dates_distance)
    except ValueError as e:
        raise ConfigError(str(e)) from e
    if max_distance.total_seconds() < 0:
        raise ConfigError(f"max dates distance must not be negative: {args.max_dates_distance!r}")

    # Parsed even under "media" so a typo never goes unnoticed
    timezone_custom = parse_timezone(args.timezone_custom, legacy=args.legacy_offset_arithmetic)

    return RenameConfig(
        timezone_source=timezone_source,
        timezone_custom=timezone_custom,
        timezone_custom_str=args.timezone_custom,
        max_dates_distance=max_distance,
        action=action,
        strict_metadata=args.strict_metadata,
        legacy_offset_arithmetic=args.legacy_offset_arithmetic,
    )


def main(argv=None):
    args = parse_args(argv)

    setup_logging(args.log_file, args.verbose)

    try:
        rename_config = build_config(args)
    except MediaCatalogerError as e:
        logging.error(f"Invalid configuration: {e}")
        sys.exit(1)

    media_dir = args.media_dir.resolve()
    if not media_dir.is_dir():
        logging.error(f"Media directory not found: {media_dir}")
        sys.exit(1)

    app = MediaCatalogerApp(rename_config, show_progress=not args.no_progress)

    try:
        app.rename(media_dir)
    except KeyboardInterrupt:
        logging.warning("Operation cancelled by user.")
        sys.exit(1)
    except Exception:
        logging.exception("Fatal error during renaming.")
        sys.exit(1)


if __name__ == "__main__":
    main()
