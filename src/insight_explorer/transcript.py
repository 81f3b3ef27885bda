"""Helpers for showing transcript comments: timestamps, initials, filtering."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from .models import Cluster, Thread

_TIMESTAMP = re.compile(r"^\s*(?:(\d+):)?(\d+):(\d{1,2})\s*$")


@dataclass(frozen=True)
class TranscriptMessage:
    """A single utterance in a transcript view."""

    id: str
    speaker: str
    start_time: str
    text: str


def parse_timestamp(value: str) -> Optional[int]:
    """Seconds for ``MM:SS`` or ``H:MM:SS``; None when malformed.

    Minutes are unbounded in ``MM:SS`` but must be below 60 once an hour
    part is present.
    """
    match = _TIMESTAMP.match(value or "")
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    if int(seconds) >= 60:
        return None
    if hours is not None and int(minutes) >= 60:
        return None
    return int(hours or 0) * 3600 + int(minutes) * 60 + int(seconds)


def format_timestamp(value: str) -> str:
    """Normalize a timestamp for display (``7:05``, ``1:02:09``).

    Malformed input is returned unchanged.
    """
    total = parse_timestamp(value)
    if total is None:
        return value
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def author_initials(name: str) -> str:
    """Up to two uppercase initials from a speaker name."""
    return "".join(word[0] for word in name.split() if word).upper()[:2]


def filter_messages(
    messages: Iterable[TranscriptMessage],
    query: str = "",
    speaker: Optional[str] = None,
    speaker_name: Callable[[str], str] = lambda speaker_id: speaker_id,
) -> List[TranscriptMessage]:
    """Messages whose text or speaker name contains ``query`` (case-insensitive).

    Args:
        messages: Messages in display order
        query: Substring to look for; blank keeps everything
        speaker: Keep only this speaker id, when given
        speaker_name: Maps a speaker id to a display name for matching
    """
    needle = query.strip().lower()
    kept = []
    for message in messages:
        if speaker is not None and message.speaker != speaker:
            continue
        if needle and needle not in message.text.lower() and needle not in speaker_name(message.speaker).lower():
            continue
        kept.append(message)
    return kept


def highlight_match(text: str, query: str) -> str:
    """Wrap case-insensitive occurrences of ``query`` in ``<mark>`` tags.

    The query is matched literally; regex metacharacters in it have no
    special meaning. The surrounding text is not escaped.
    """
    if not query:
        return text
    pattern = re.compile(f"({re.escape(query)})", re.IGNORECASE)
    return pattern.sub(r"<mark>\1</mark>", text)


def messages_for_threads(threads: Iterable[Thread]) -> List[TranscriptMessage]:
    """Comments of the given threads, ordered by start time.

    Comments with malformed timestamps keep their relative order at the end.
    """
    messages = [
        TranscriptMessage(id=c.id, speaker=c.author, start_time=c.start_time, text=c.text)
        for thread in threads
        for c in thread.comments
    ]
    return sorted(
        messages,
        key=lambda m: (parse_timestamp(m.start_time) is None, parse_timestamp(m.start_time) or 0),
    )


def messages_for_cluster(cluster: Cluster) -> List[TranscriptMessage]:
    return messages_for_threads(cluster.threads)
