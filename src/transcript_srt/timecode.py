"""Timestamp parsing and SRT time formatting."""

import logging
import math
from datetime import datetime, timedelta, timezone

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLIS_PER_DAY = 86_400_000


def parse_time_to_seconds(text: str) -> float | None:
    """Parse "mm:ss" or "hh:mm:ss" into seconds. Returns None if unparsable."""
    try:
        # An empty part counts as zero ("01:" is one minute).
        parts = [float(p) if p.strip() else 0.0 for p in text.split(":")]
    except ValueError:
        logger.warning(f'Could not parse numbers from timestamp: "{text}".')
        return None

    if not all(math.isfinite(p) for p in parts):
        logger.warning(f'Could not parse numbers from timestamp: "{text}".')
        return None

    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]

    logger.warning(
        f'Invalid timestamp format received: "{text}". Expected "mm:ss" or "hh:mm:ss".'
    )
    return None


def format_seconds(seconds: float) -> str:
    """Format seconds as HH:MM:SS,mmm.

    The value is laid onto a UTC clock starting at the epoch, so the hour
    wraps at 24 (86400 seconds formats as 00:00:00,000).
    """
    # Whole days are dropped; only the time of day is shown.
    millis_of_day = int(seconds * 1000) % _MILLIS_PER_DAY
    moment = _EPOCH + timedelta(milliseconds=millis_of_day)
    millis = moment.microsecond // 1000
    return f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d},{millis:03d}"
