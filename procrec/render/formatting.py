"""Human-readable formatting of cell values."""

from datetime import datetime

_UNITS = " KMGTPE"

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000
_NS_PER_MIN = 60 * _NS_PER_S
_NS_PER_HOUR = 60 * _NS_PER_MIN


def format_bytes(n: int) -> str:
    """Format a signed byte count with binary prefixes.

    Below 1024 the exact count is printed ("1023 B"); above it the value is
    scaled to its power-of-1024 tier with three decimals ("1.000 KiB").
    """
    magnitude = abs(n)
    if magnitude < 1024:
        return f"{n} B"
    tier = min(magnitude.bit_length() // 10, len(_UNITS) - 1)
    return f"{n / (1 << (tier * 10)):.3f} {_UNITS[tier]}iB"


def format_duration(ns: int) -> str:
    """Format nanoseconds as the largest natural units, e.g. "2m3.5s"."""
    if ns == 0:
        return "0s"
    sign = "-" if ns < 0 else ""
    n = abs(ns)
    if n < _NS_PER_US:
        return f"{sign}{n}ns"
    if n < _NS_PER_MS:
        return f"{sign}{_decimal(n, _NS_PER_US)}µs"
    if n < _NS_PER_S:
        return f"{sign}{_decimal(n, _NS_PER_MS)}ms"
    hours, rest = divmod(n, _NS_PER_HOUR)
    minutes, rest = divmod(rest, _NS_PER_MIN)
    seconds = _decimal(rest, _NS_PER_S)
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


def _decimal(value: int, unit: int) -> str:
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{fraction:0{digits}d}".rstrip("0")


def format_clock(ts: datetime) -> str:
    return ts.strftime("%H:%M:%S")


def format_timestamp_ns(ns: int) -> str:
    """Local wall-clock time of an epoch-nanosecond timestamp, to the nanosecond."""
    seconds, fraction = divmod(ns, _NS_PER_S)
    return f"{datetime.fromtimestamp(seconds):%H:%M:%S}.{fraction:09d}"


def seconds_to_ns(seconds: float) -> int:
    # truncates toward zero
    return int(seconds * _NS_PER_S)
