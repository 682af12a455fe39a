"""Tests for grouping timed words into caption phrases."""

from __future__ import annotations

import pytest

from domain.caption_style import CaptionRenderRequest, CaptionValidationError
from domain.transcript import TimedWord
from service.phrase_grouping import (
    GroupingConfig,
    PhraseGroup,
    add_display_padding,
    break_into_lines,
    build_deck_requests,
    group_words_into_phrases,
    merge_short_groups,
)


def timed_words(*words: str, step_ms: float = 200, length_ms: float = 150) -> tuple[TimedWord, ...]:
    """Build evenly spaced timed words with short gaps."""
    return tuple(
        TimedWord(word=word, start_ms=index * step_ms, end_ms=index * step_ms + length_ms)
        for index, word in enumerate(words)
    )


def build_group(group_id: str, start_ms: float, end_ms: float, word: str = "w") -> PhraseGroup:
    """Build a single-word phrase group."""
    return PhraseGroup(
        group_id=group_id,
        lines=(word,),
        words=(TimedWord(word=word, start_ms=start_ms, end_ms=end_ms),),
        start_ms=start_ms,
        end_ms=end_ms,
    )


def test_break_into_lines_by_characters() -> None:
    """Pack words into lines by character count."""
    words = timed_words("alpha", "beta", "gamma", "delta")
    assert break_into_lines(words, 11) == ("alpha beta", "gamma delta")


def test_group_splits_on_word_limit_with_sequential_ids() -> None:
    """Start a new group after the word limit."""
    words = timed_words(*[f"w{index}" for index in range(10)])
    groups = group_words_into_phrases(words)

    assert [len(group.words) for group in groups] == [8, 2]
    assert [group.group_id for group in groups] == ["pg_0001", "pg_0002"]
    assert groups[0].start_ms == 0
    assert groups[0].end_ms == 7 * 200 + 150


def test_group_splits_on_pause() -> None:
    """Break at a pause longer than the threshold."""
    words = (
        TimedWord(word="before", start_ms=0, end_ms=200),
        TimedWord(word="after", start_ms=600, end_ms=800),
    )
    groups = group_words_into_phrases(words)
    assert [group.text for group in groups] == ["before", "after"]


def test_group_splits_on_sentence_end() -> None:
    """Break after a sentence-ending word."""
    groups = group_words_into_phrases(timed_words("Hi.", "there", "friend"))
    assert [group.text for group in groups] == ["Hi.", "there friend"]


def test_group_respects_line_limit() -> None:
    """Start a new group when words would need too many lines."""
    config = GroupingConfig(max_chars_per_line=10, max_lines_per_group=2)
    groups = group_words_into_phrases(timed_words(*["aaaa"] * 5), config)

    assert [len(group.words) for group in groups] == [4, 1]
    assert groups[0].lines == ("aaaa aaaa", "aaaa aaaa")


def test_group_empty_input() -> None:
    """Return no groups for no words."""
    assert group_words_into_phrases(()) == ()


def test_grouping_config_validation() -> None:
    """Reject non-positive limits."""
    with pytest.raises(CaptionValidationError) as exc_info:
        GroupingConfig(max_words_per_group=0)
    assert exc_info.value.code == "caption_engine.input.invalid_grouping"


def test_merge_short_groups_into_next() -> None:
    """Merge a short group into the following one and keep the last group."""
    groups = (
        build_group("pg_0001", 0, 300, "quick"),
        build_group("pg_0002", 400, 1500, "merge"),
        build_group("pg_0003", 1600, 1700, "tail"),
    )
    merged = merge_short_groups(groups)

    assert [group.group_id for group in merged] == ["pg_0001", "pg_0003"]
    assert merged[0].text == "quick merge"
    assert (merged[0].start_ms, merged[0].end_ms) == (0, 1500)
    assert merged[1].text == "tail"


def test_add_display_padding_respects_neighbours() -> None:
    """Pad groups without crossing the safety margin before the next group."""
    groups = (build_group("pg_0001", 50, 500), build_group("pg_0002", 700, 1200))
    padded = add_display_padding(groups)

    assert (padded[0].start_ms, padded[0].end_ms) == (0, 600)
    assert padded[1].start_ms == pytest.approx(700 - 200 / 3)
    assert padded[1].end_ms == 1300


def test_add_display_padding_tight_gap() -> None:
    """Keep the original start when the gap is too small to pad."""
    groups = (build_group("pg_0001", 0, 500), build_group("pg_0002", 520, 900))
    padded = add_display_padding(groups)

    assert padded[0].end_ms == 500
    assert padded[1].start_ms == 520


def test_build_deck_requests_uses_group_text() -> None:
    """Copy the template for each group with the group's text."""
    template = CaptionRenderRequest(
        preset_id="boxed_white",
        headline_text="",
        container_width_px=720,
        deck_target_font_size=30,
    )
    groups = group_words_into_phrases(timed_words("Hello.", "World", "again"))
    requests = build_deck_requests(groups, template)

    assert [request.headline_text for request in requests] == ["Hello.", "World again"]
    assert all(request.preset_id == "boxed_white" for request in requests)
    assert all(request.container_width_px == 720 for request in requests)
    assert all(request.deck_target_font_size is None for request in requests)
