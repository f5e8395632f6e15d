"""Utility functions."""
import re
from typing import Optional, Tuple, Union

MMSS_STRICT = re.compile(r'^(\d+):(\d{2})$')

# Values below this without a colon are plain seconds
SECONDS_CUTOFF = 60
ONE_HOUR = 3600
ROUND_TIME_TOLERANCE = 5
ROUND_TIME_VALIDATION_TOLERANCE = 2


def to_int(s: Optional[str]) -> Optional[int]:
    """Convert string to int, returning None if conversion fails."""
    try:
        return int(s) if s is not None else None
    except Exception:
        return None


def parse_time_to_seconds(value: Union[str, int, None]) -> Optional[int]:
    """
    Parse a whiteboard time to seconds.

    "1:13" -> 73, "113" -> 73 (missing colon), "45" -> 45.
    A colon-less value whose last two digits are 60 or more is read as raw
    seconds when under an hour, otherwise it is rejected.
    """
    if value is None:
        return None
    if isinstance(value, int):
        return value if value >= 0 else None

    text = value.strip()
    if not text:
        return None

    if ":" in text:
        parts = text.split(":")
        if len(parts) != 2:
            return None
        minutes, seconds = to_int(parts[0].strip()), to_int(parts[1].strip())
        if minutes is None or seconds is None:
            return None
        if minutes < 0 or seconds < 0 or seconds >= 60:
            return None
        return minutes * 60 + seconds

    if not text.isdigit():
        return None
    num = int(text)

    if num >= SECONDS_CUTOFF:
        minutes, seconds = divmod(num, 100)
        if seconds >= 60:
            return num if num < ONE_HOUR else None
        return minutes * 60 + seconds

    return num


def format_seconds_to_time(seconds: Union[int, float, None]) -> str:
    """Format seconds as M:SS ("1:13")."""
    if seconds is None or seconds < 0:
        return "0:00"
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"


def parse_mmss_to_seconds(text: Optional[str]) -> Optional[int]:
    """Strict MM:SS parse; anything else returns None."""
    if not text:
        return None
    match = MMSS_STRICT.match(text.strip())
    if not match:
        return None
    minutes, seconds = int(match.group(1)), int(match.group(2))
    if seconds >= 60:
        return None
    return minutes * 60 + seconds


def validate_round_time(
    start_time: str,
    stop_time: str,
    written_round_time: Optional[int] = None,
    tolerance: int = ROUND_TIME_VALIDATION_TOLERANCE,
) -> Tuple[bool, int, Optional[int]]:
    """
    Check that a round time equals stop - start.

    Returns:
        Tuple of (is_valid, calculated_round_time, discrepancy)
    """
    start = parse_mmss_to_seconds(start_time)
    stop = parse_mmss_to_seconds(stop_time)
    if start is None or stop is None:
        return False, 0, None

    calculated = stop - start
    if written_round_time is None:
        return True, calculated, None

    discrepancy = abs(calculated - written_round_time)
    return discrepancy <= tolerance, calculated, discrepancy


def auto_correct_round_time(
    start_time: str,
    stop_time: str,
    written_round_time: Optional[int] = None,
    tolerance: int = ROUND_TIME_TOLERANCE,
) -> int:
    """Prefer stop - start unless the written time is off by more than the tolerance."""
    is_valid, calculated, discrepancy = validate_round_time(start_time, stop_time, written_round_time)

    if is_valid or written_round_time is None:
        return calculated
    if discrepancy is not None and discrepancy <= tolerance:
        return calculated
    return written_round_time
