"""Subtitle interval synthesis and transcript rendering."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from transcript_srt.models import SubtitleBlock, TranscriptEntry
from transcript_srt.timecode import format_seconds, parse_time_to_seconds

logger = logging.getLogger(__name__)

# Seconds a cue stays on screen when the next start time can't be used.
DEFAULT_DURATION = 3


def _raw_timestamp(item: Any) -> Any:
    if isinstance(item, TranscriptEntry):
        return item.timestamp
    if isinstance(item, Mapping):
        return item.get("timestamp")
    return None


def _end_time(entries: Sequence[Any], i: int, start: float) -> float:
    if i == len(entries) - 1:
        return start + DEFAULT_DURATION

    next_timestamp = _raw_timestamp(entries[i + 1])
    if not isinstance(next_timestamp, str):
        logger.warning(
            f"Invalid next entry or timestamp field at index {i + 1}. "
            f"Using default duration for entry {i}."
        )
        return start + DEFAULT_DURATION

    next_start = parse_time_to_seconds(next_timestamp)
    if next_start is None or next_start <= start:
        logger.warning(
            f'Invalid, out-of-order, or unparsable timestamp for next entry at index {i + 1} '
            f'("{next_timestamp}"). Using default duration for entry {i}.'
        )
        return start + DEFAULT_DURATION
    return next_start


def synthesize_blocks(entries: Sequence[Any]) -> list[SubtitleBlock]:
    """Turn start-only transcript entries into timed subtitle blocks.

    Each cue ends where the next one starts, provided the next timestamp
    parses and is strictly later; otherwise it lasts DEFAULT_DURATION.
    Malformed entries are skipped, and block indices follow the position
    in ``entries`` so dropped entries leave gaps in the numbering.
    """
    blocks = []
    for i, raw in enumerate(entries):
        try:
            entry = TranscriptEntry.model_validate(raw, strict=True)
        except ValidationError:
            logger.warning(f"Skipping entry with missing/invalid fields at index {i}: {raw!r}")
            continue

        start = parse_time_to_seconds(entry.timestamp)
        if start is None:
            logger.warning(
                f'Skipping entry due to invalid timestamp format at index {i}: "{entry.timestamp}"'
            )
            continue

        blocks.append(
            SubtitleBlock(
                index=i + 1,
                start=start,
                end=_end_time(entries, i, start),
                text=entry.text,
            )
        )
    return blocks


def render_srt(blocks: Sequence[SubtitleBlock]) -> str:
    return "".join(
        f"{b.index}\n{format_seconds(b.start)} --> {format_seconds(b.end)}\n{b.text}\n\n"
        for b in blocks
    )


def transcript_to_srt(entries: Sequence[Any]) -> str:
    return render_srt(synthesize_blocks(entries))


def render_plain_text(entries: Sequence[TranscriptEntry], timestamps: bool = False) -> str:
    """Format entries for download, one paragraph per entry."""
    if timestamps:
        return "\n\n".join(f"[{e.timestamp}]\n[{e.speaker}]\n{e.text}" for e in entries)
    return "\n\n".join(f"[{e.speaker}]\n{e.text}" for e in entries)
