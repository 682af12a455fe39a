"""Group timed words into caption phrases and build deck requests from them."""

from __future__ import annotations

from dataclasses import dataclass, replace
import math
from typing import Sequence, Tuple

from domain.caption_style import (
    INVALID_GROUPING_CODE,
    CaptionRenderRequest,
    CaptionValidationError,
)
from domain.transcript import TimedWord

SENTENCE_END_CHARACTERS = (".", "!", "?")
DEFAULT_MIN_GROUP_DURATION_MS = 800
DEFAULT_DISPLAY_PADDING_MS = 100
DEFAULT_SAFETY_MARGIN_MS = 30


@dataclass(frozen=True)
class GroupingConfig:
    """Limits that decide where one phrase ends and the next begins."""

    max_chars_per_line: int = 32
    max_lines_per_group: int = 2
    max_words_per_group: int = 8
    min_pause_for_break_ms: float = 300
    prefer_break_on_punctuation: bool = True

    def __post_init__(self) -> None:
        if self.max_chars_per_line <= 0:
            raise CaptionValidationError(
                INVALID_GROUPING_CODE, "max_chars_per_line must be positive"
            )
        if self.max_lines_per_group <= 0:
            raise CaptionValidationError(
                INVALID_GROUPING_CODE, "max_lines_per_group must be positive"
            )
        if self.max_words_per_group <= 0:
            raise CaptionValidationError(
                INVALID_GROUPING_CODE, "max_words_per_group must be positive"
            )
        if self.min_pause_for_break_ms < 0:
            raise CaptionValidationError(
                INVALID_GROUPING_CODE, "min_pause_for_break_ms must be non-negative"
            )


@dataclass(frozen=True)
class PhraseGroup:
    """A run of words shown together as one caption."""

    group_id: str
    lines: Tuple[str, ...]
    words: Tuple[TimedWord, ...]
    start_ms: float
    end_ms: float

    @property
    def text(self) -> str:
        return " ".join(word.word for word in self.words)


def format_group_id(index: int) -> str:
    """Return the deterministic id for the index-th group (1-based)."""
    return f"pg_{index:04d}"


def break_into_lines(
    words: Sequence[TimedWord], max_chars_per_line: int
) -> Tuple[str, ...]:
    """Pack words into lines by character count."""
    lines: list[str] = []
    current_line = ""
    for timed_word in words:
        trial_line = f"{current_line} {timed_word.word}" if current_line else timed_word.word
        if len(trial_line) <= max_chars_per_line:
            current_line = trial_line
        else:
            if current_line:
                lines.append(current_line)
            current_line = timed_word.word
    if current_line:
        lines.append(current_line)
    return tuple(lines)


def group_words_into_phrases(
    words: Sequence[TimedWord], config: GroupingConfig | None = None
) -> Tuple[PhraseGroup, ...]:
    """Split timed words into phrases on size limits, pauses and sentence ends."""
    config = config or GroupingConfig()
    groups: list[PhraseGroup] = []
    current: list[TimedWord] = []

    def flush() -> None:
        if not current:
            return
        groups.append(
            PhraseGroup(
                group_id=format_group_id(len(groups) + 1),
                lines=break_into_lines(current, config.max_chars_per_line),
                words=tuple(current),
                start_ms=current[0].start_ms,
                end_ms=current[-1].end_ms,
            )
        )
        current.clear()

    for index, timed_word in enumerate(words):
        trial = current + [timed_word]
        too_many_lines = (
            len(break_into_lines(trial, config.max_chars_per_line))
            > config.max_lines_per_group
        )
        if too_many_lines or len(trial) > config.max_words_per_group:
            flush()
        current.append(timed_word)

        if index + 1 < len(words):
            pause_ms = words[index + 1].start_ms - timed_word.end_ms
            sentence_end = (
                config.prefer_break_on_punctuation
                and timed_word.word.endswith(SENTENCE_END_CHARACTERS)
            )
            if pause_ms >= config.min_pause_for_break_ms or sentence_end:
                flush()

    flush()
    return tuple(groups)


def merge_short_groups(
    groups: Sequence[PhraseGroup],
    min_duration_ms: float = DEFAULT_MIN_GROUP_DURATION_MS,
    max_chars_per_line: int = GroupingConfig.max_chars_per_line,
) -> Tuple[PhraseGroup, ...]:
    """Merge every group shorter than min_duration_ms into the group after it."""
    if len(groups) <= 1:
        return tuple(groups)

    merged: list[PhraseGroup] = []
    pending: PhraseGroup | None = None
    for index, group in enumerate(groups):
        if pending is not None:
            combined_words = pending.words + group.words
            merged.append(
                PhraseGroup(
                    group_id=pending.group_id,
                    lines=break_into_lines(combined_words, max_chars_per_line),
                    words=combined_words,
                    start_ms=pending.start_ms,
                    end_ms=group.end_ms,
                )
            )
            pending = None
        elif group.end_ms - group.start_ms < min_duration_ms and index < len(groups) - 1:
            pending = group
        else:
            merged.append(group)

    return tuple(merged)


def add_display_padding(
    groups: Sequence[PhraseGroup],
    padding_ms: float = DEFAULT_DISPLAY_PADDING_MS,
    safety_margin_ms: float = DEFAULT_SAFETY_MARGIN_MS,
) -> Tuple[PhraseGroup, ...]:
    """Extend each group's display window without running into its neighbours."""
    padded: list[PhraseGroup] = []
    for index, group in enumerate(groups):
        previous_group = groups[index - 1] if index > 0 else None
        next_group = groups[index + 1] if index + 1 < len(groups) else None
        max_end_ms = (
            next_group.start_ms - safety_margin_ms if next_group is not None else math.inf
        )

        start_ms = group.start_ms
        if previous_group is None:
            start_ms = group.start_ms - min(padding_ms, group.start_ms)
        else:
            gap_before = group.start_ms - previous_group.end_ms
            if gap_before > padding_ms + safety_margin_ms:
                start_ms = group.start_ms - min(padding_ms, gap_before / 3)

        end_ms = group.end_ms
        if max_end_ms > group.end_ms:
            end_ms = group.end_ms + min(padding_ms, max_end_ms - group.end_ms)

        padded.append(replace(group, start_ms=max(0.0, start_ms), end_ms=end_ms))
    return tuple(padded)


def build_deck_requests(
    groups: Sequence[PhraseGroup], template: CaptionRenderRequest
) -> Tuple[CaptionRenderRequest, ...]:
    """Turn phrase groups into caption requests that share the template's style."""
    return tuple(
        replace(template, headline_text=group.text, deck_target_font_size=None)
        for group in groups
    )
