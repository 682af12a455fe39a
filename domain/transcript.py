"""Timed-word transcripts parsed from SRT, WebVTT, JSON or plain text."""

from __future__ import annotations

from dataclasses import dataclass
import json
import re
from typing import Any, Sequence, Tuple

from domain.caption_style import (
    INVALID_TRANSCRIPT_CODE,
    CaptionValidationError,
    normalize_whitespace,
)

TIME_RANGE_PATTERN = re.compile(
    r"^(?P<start>(?:\d{1,2}:)?\d{2}:\d{2}[,.]\d{1,3})\s*-->\s*"
    r"(?P<end>(?:\d{1,2}:)?\d{2}:\d{2}[,.]\d{1,3})(?:\s+.*)?$"
)
TIMECODE_PATTERN = re.compile(r"^(?:(\d{1,2}):)?(\d{2}):(\d{2})[,.](\d{1,3})$")
MARKUP_TAG_PATTERN = re.compile(r"<[^>]*>")
PLAIN_WORD_DURATION_MS = 300
PLAIN_WORD_GAP_MS = 50


@dataclass(frozen=True)
class TimedWord:
    """A word and the interval in which it is spoken."""

    word: str
    start_ms: float
    end_ms: float
    confidence: float | None = None

    def __post_init__(self) -> None:
        if self.start_ms < 0:
            raise CaptionValidationError(
                INVALID_TRANSCRIPT_CODE, "word start time must be non-negative"
            )
        if self.end_ms < self.start_ms:
            raise CaptionValidationError(
                INVALID_TRANSCRIPT_CODE, "word end time precedes start time"
            )
        if self.confidence is not None and not (0.0 <= self.confidence <= 1.0):
            raise CaptionValidationError(
                INVALID_TRANSCRIPT_CODE, "word confidence must be in [0, 1]"
            )


@dataclass(frozen=True)
class Transcript:
    """Ordered timed words plus the overall duration."""

    words: Tuple[TimedWord, ...]
    duration_ms: float


def parse_timecode_ms(timecode_value: str) -> float:
    """Parse an SRT or WebVTT timecode into milliseconds."""
    match = TIMECODE_PATTERN.fullmatch(timecode_value.strip())
    if not match:
        raise CaptionValidationError(
            INVALID_TRANSCRIPT_CODE, f"invalid timecode: {timecode_value!r}"
        )
    hours_text, minutes_text, seconds_text, millis_text = match.groups()
    hours = int(hours_text) if hours_text else 0
    millis = int(millis_text.ljust(3, "0"))
    return float(
        hours * 3_600_000 + int(minutes_text) * 60_000 + int(seconds_text) * 1000 + millis
    )


def clean_cue_text(lines: Sequence[str]) -> str:
    """Join cue lines and strip inline markup."""
    return normalize_whitespace(MARKUP_TAG_PATTERN.sub("", " ".join(lines)))


def spread_cue_words(text_value: str, start_ms: float, end_ms: float) -> list[TimedWord]:
    """Split a cue into words that share its duration evenly."""
    words = text_value.split()
    if not words:
        return []
    word_duration = (end_ms - start_ms) / len(words)
    return [
        TimedWord(
            word=word,
            start_ms=start_ms + index * word_duration,
            end_ms=start_ms + (index + 1) * word_duration,
        )
        for index, word in enumerate(words)
    ]


def _parse_time_range(time_line: str) -> Tuple[float, float]:
    match = TIME_RANGE_PATTERN.fullmatch(time_line.strip())
    if not match:
        raise CaptionValidationError(
            INVALID_TRANSCRIPT_CODE, f"invalid time range: {time_line!r}"
        )
    start_ms = parse_timecode_ms(match.group("start"))
    end_ms = parse_timecode_ms(match.group("end"))
    if end_ms < start_ms:
        raise CaptionValidationError(
            INVALID_TRANSCRIPT_CODE, f"cue ends before it starts: {time_line!r}"
        )
    return start_ms, end_ms


def parse_srt(text_value: str) -> Transcript:
    """Parse SRT content into a timed-word transcript."""
    normalized = text_value.replace("\ufeff", "").replace("\r\n", "\n").strip()
    if not normalized:
        return Transcript(words=(), duration_ms=0.0)

    words: list[TimedWord] = []
    max_end_ms = 0.0
    for block in re.split(r"\n\s*\n", normalized):
        lines = [line.strip() for line in block.splitlines() if line.strip()]
        if lines and lines[0].isdigit():
            lines = lines[1:]
        if not lines:
            continue
        if "-->" not in lines[0]:
            raise CaptionValidationError(
                INVALID_TRANSCRIPT_CODE, "SRT block missing timecode"
            )

        start_ms, end_ms = _parse_time_range(lines[0])
        max_end_ms = max(max_end_ms, end_ms)
        words.extend(spread_cue_words(clean_cue_text(lines[1:]), start_ms, end_ms))

    return Transcript(words=tuple(words), duration_ms=max_end_ms)


def parse_vtt(text_value: str) -> Transcript:
    """Parse WebVTT content into a timed-word transcript."""
    lines = text_value.replace("\ufeff", "").replace("\r\n", "\n").split("\n")
    words: list[TimedWord] = []
    max_end_ms = 0.0

    index = 0
    while index < len(lines):
        line = lines[index].strip()
        index += 1
        if "-->" not in line:
            continue
        start_ms, end_ms = _parse_time_range(line)
        max_end_ms = max(max_end_ms, end_ms)
        cue_lines: list[str] = []
        while index < len(lines) and lines[index].strip() and "-->" not in lines[index]:
            cue_lines.append(lines[index].strip())
            index += 1
        words.extend(spread_cue_words(clean_cue_text(cue_lines), start_ms, end_ms))

    return Transcript(words=tuple(words), duration_ms=max_end_ms)


def parse_json_words(entries: Sequence[Any]) -> Transcript:
    """Parse word entries with start/end in seconds."""
    words: list[TimedWord] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise CaptionValidationError(
                INVALID_TRANSCRIPT_CODE, "word entry must be an object"
            )
        try:
            word = str(entry["word"])
            start_ms = float(entry["start"]) * 1000.0
            end_ms = float(entry["end"]) * 1000.0
        except (KeyError, TypeError, ValueError) as exc:
            raise CaptionValidationError(
                INVALID_TRANSCRIPT_CODE, f"invalid word entry: {entry!r}"
            ) from exc
        confidence = entry.get("confidence")
        words.append(
            TimedWord(
                word=word,
                start_ms=start_ms,
                end_ms=end_ms,
                confidence=float(confidence) if confidence is not None else None,
            )
        )

    duration_ms = words[-1].end_ms if words else 0.0
    return Transcript(words=tuple(words), duration_ms=duration_ms)


def parse_plain_text(text_value: str) -> Transcript:
    """Assign synthetic timing to untimed text."""
    words: list[TimedWord] = []
    cursor_ms = 0.0
    for word in normalize_whitespace(text_value).split():
        end_ms = cursor_ms + PLAIN_WORD_DURATION_MS
        words.append(TimedWord(word=word, start_ms=cursor_ms, end_ms=end_ms))
        cursor_ms = end_ms + PLAIN_WORD_GAP_MS
    return Transcript(words=tuple(words), duration_ms=cursor_ms)


def is_srt_content(text_value: str) -> bool:
    """Return True when any line looks like an SRT/VTT time range."""
    return any(
        TIME_RANGE_PATTERN.fullmatch(line.strip())
        for line in text_value.splitlines()
        if line.strip()
    )


def detect_and_parse(content: str) -> Transcript:
    """Detect the transcript format and parse it."""
    trimmed = content.replace("\ufeff", "").strip()

    if trimmed.startswith("WEBVTT"):
        return parse_vtt(trimmed)

    if trimmed.startswith("[") or trimmed.startswith("{"):
        try:
            parsed = json.loads(trimmed)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, list):
            return parse_json_words(parsed)
        if isinstance(parsed, dict) and isinstance(parsed.get("words"), list):
            return parse_json_words(parsed["words"])

    if is_srt_content(trimmed):
        return parse_srt(trimmed)

    return parse_plain_text(trimmed)
