"""Break headline text into candidate display lines."""

from __future__ import annotations

import math
from typing import Tuple

from domain.caption_style import LayoutMode, normalize_whitespace

STRONG_BOUNDARY_CHARACTERS = (".", "!", "?", "\u2014")
CLOSING_CHARACTERS = "\"')]}\u201d\u2019\u00bb"
MAX_TITLE_LINES = 3


def ideal_line_count(word_count: int) -> int:
    """Return the preferred number of title lines for a word count."""
    if word_count <= 4:
        return 1
    if word_count <= 9:
        return 2
    return 3


def ends_with_strong_boundary(word: str) -> bool:
    """Return True when a word ends a phrase, ignoring closing quotes."""
    stripped = word.rstrip(CLOSING_CHARACTERS)
    return stripped.endswith(STRONG_BOUNDARY_CHARACTERS)


def compose_title_lines(words: Tuple[str, ...]) -> Tuple[str, ...]:
    """Greedily balance words across the ideal number of title lines.

    The words-per-line target is recomputed after every break from the words
    and lines still remaining. Balance breaks stop once the ideal line count
    is reached, and punctuation breaks stop at ``MAX_TITLE_LINES``.
    """
    ideal = ideal_line_count(len(words))
    lines: list[str] = []
    current: list[str] = []
    for index, word in enumerate(words):
        remaining_words = len(words) - index + len(current)
        remaining_lines = max(1, ideal - len(lines))
        words_per_line = math.ceil(remaining_words / remaining_lines)
        if current and len(current) >= words_per_line and len(lines) < ideal - 1:
            lines.append(" ".join(current))
            current = []
        current.append(word)
        is_last = index == len(words) - 1
        if (
            not is_last
            and ends_with_strong_boundary(word)
            and len(lines) < MAX_TITLE_LINES - 1
        ):
            lines.append(" ".join(current))
            current = []
    if current:
        lines.append(" ".join(current))
    return tuple(lines)


def compose_lines(text_value: str, layout_mode: LayoutMode) -> Tuple[str, ...]:
    """Compose candidate lines for a layout mode. Words are never split."""
    normalized = normalize_whitespace(text_value)
    if not normalized:
        return ("",)
    if layout_mode is LayoutMode.PARAGRAPH:
        return (normalized,)
    return compose_title_lines(tuple(normalized.split(" ")))
