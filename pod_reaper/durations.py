import re
from datetime import timedelta

# ----------------------------
# Go-style duration strings ("1h30m", "1m59s", "-5m", "250ms")
# ----------------------------

_UNIT_MICROSECONDS = {
    "ns": 0.001,
    "us": 1.0,
    "µs": 1.0,
    "μs": 1.0,
    "ms": 1000.0,
    "s": 1_000_000.0,
    "m": 60_000_000.0,
    "h": 3_600_000_000.0,
}

_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

# time.Duration is an int64 count of nanoseconds
_MAX_MICROSECONDS = ((1 << 63) - 1) / 1000
_MIN_MICROSECONDS = (1 << 63) / 1000


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration the way Go's time.ParseDuration does.

    A duration is an optional sign followed by one or more decimal numbers,
    each with an optional fraction and a mandatory unit. "0" is the only
    value accepted without a unit. Whitespace is never stripped.
    """
    if not isinstance(value, str) or not value:
        raise ValueError(f"invalid duration {value!r}")

    body = value
    negative = False
    if body[0] in "+-":
        negative = body[0] == "-"
        body = body[1:]

    if body == "0":
        return timedelta(0)
    if not body:
        raise ValueError(f"invalid duration {value!r}")

    total = 0.0
    pos = 0
    while pos < len(body):
        match = _COMPONENT.match(body, pos)
        if match is None:
            if re.match(r"\d*\.?\d*$", body[pos:]):
                raise ValueError(f"missing unit in duration {value!r}")
            raise ValueError(f"invalid duration {value!r}")
        number, unit = match.groups()
        total += float(number) * _UNIT_MICROSECONDS[unit]
        pos = match.end()

    if total > (_MIN_MICROSECONDS if negative else _MAX_MICROSECONDS):
        raise ValueError(f"invalid duration {value!r}")

    result = timedelta(microseconds=total)
    return -result if negative else result


def format_duration(delta: timedelta) -> str:
    """
    Render a timedelta in Go notation, truncated to whole seconds.

    >>> format_duration(timedelta(minutes=2))
    '2m0s'
    """
    seconds = int(delta.total_seconds())
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)

    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)

    if hours:
        return f"{sign}{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{sign}{minutes}m{secs}s"
    return f"{sign}{secs}s"
