from datetime import datetime, timedelta


def distance_ms(new_date: datetime, prior_date: datetime) -> int:
    """Signed distance in whole milliseconds, truncated toward zero."""
    delta = new_date - prior_date
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    millis = abs(micros) // 1000
    return millis if micros >= 0 else -millis


def is_too_far(new_date: datetime, prior_date: datetime, max_distance_ms: int) -> bool:
    """True when the two dates differ by more than the allowed drift."""
    return abs(distance_ms(new_date, prior_date)) > max_distance_ms


def format_distance(delta: timedelta) -> str:
    """
    Renders a duration the way the CLI accepts it, e.g. "-1h2m3s" or "250ms".
    """
    micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    if micros == 0:
        return "0s"

    sign = "-" if micros < 0 else ""
    micros = abs(micros)
    if micros < 1_000_000:
        if micros % 1000 == 0:
            return f"{sign}{micros // 1000}ms"
        return f"{sign}{micros}µs"

    hours, rem = divmod(micros, 3_600_000_000)
    minutes, rem = divmod(rem, 60_000_000)
    seconds, frac = divmod(rem, 1_000_000)

    sec_str = str(seconds)
    if frac:
        sec_str += f".{frac:06d}".rstrip("0")

    if hours:
        return f"{sign}{hours}h{minutes}m{sec_str}s"
    if minutes:
        return f"{sign}{minutes}m{sec_str}s"
    return f"{sign}{sec_str}s"
