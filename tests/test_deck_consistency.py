"""Tests for deck-wide font-size alignment."""

from __future__ import annotations

import logging

import pytest

from domain.caption_style import CaptionRenderRequest, LayoutMode
from service.deck_consistency import apply_deck_target, measure_deck, resolve_deck
from service.fit_engine import FitCache


class FixedAdvanceMeasurer:
    """Every character advances by a fixed fraction of the font size."""

    def __init__(self, advance_em: float = 0.5) -> None:
        self.advance_em = advance_em

    def measure(
        self, text_value: str, font_family: str, font_weight: int, font_size_px: float
    ) -> float:
        return len(text_value) * font_size_px * self.advance_em


def build_request(
    headline_text: str, ceiling: float | None = None, container_width_px: float = 1080
) -> CaptionRenderRequest:
    """Build a full-screen title request, optionally scaled to a given ceiling."""
    return CaptionRenderRequest(
        preset_id="clean_white",
        headline_text=headline_text,
        container_width_px=container_width_px,
        full_screen=True,
        layout_mode=LayoutMode.TITLE,
        global_scale_factor=ceiling / 52.8 if ceiling is not None else None,
    )


def test_measure_deck_takes_smallest_solo_size() -> None:
    """Use the smallest solo fit as the deck target."""
    requests = [
        build_request("First caption", 40),
        build_request("Second caption", 36),
        build_request("Third caption", 44),
    ]
    measurement = measure_deck(requests, FixedAdvanceMeasurer(0.1))

    assert [result.font_size for result in measurement.solo_results] == pytest.approx(
        [40, 36, 44]
    )
    assert measurement.target_font_size == pytest.approx(36)
    assert measurement.solo_ceilings == pytest.approx((40, 36, 44))
    assert measurement.per_caption_targets == pytest.approx((36, 36, 36))


def test_resolve_deck_refits_larger_captions_to_target() -> None:
    """Render every caption at or below the deck target."""
    requests = [
        build_request("First caption", 40),
        build_request("Second caption", 36),
        build_request("Third caption", 44),
    ]
    styles = resolve_deck(requests, FixedAdvanceMeasurer(0.1))

    assert len(styles) == 3
    for style in styles:
        assert style.font_size <= 36 + 1e-9
        assert style.font_size == pytest.approx(36)


def test_deck_uniformity_for_mixed_lengths() -> None:
    """Cap every caption at min(own ceiling, deck target)."""
    requests = [
        build_request("Hook"),
        build_request("A much longer caption that will need to shrink quite a bit to fit"),
        build_request("Medium length caption here"),
    ]
    measurer = FixedAdvanceMeasurer()
    measurement = measure_deck(requests, measurer)
    styles = resolve_deck(requests, measurer)

    target = measurement.target_font_size
    assert target == min(result.font_size for result in measurement.solo_results)
    for style, ceiling in zip(styles, measurement.solo_ceilings):
        assert style.fit_settings.base_font_size == pytest.approx(min(ceiling, target))
        assert style.font_size <= target


def test_apply_deck_target_returns_new_requests() -> None:
    """Leave the original requests untouched."""
    requests = [build_request("One"), build_request("Two")]
    measurement = measure_deck(requests, FixedAdvanceMeasurer(0.1))
    applied = apply_deck_target(requests, measurement)

    assert all(request.deck_target_font_size is None for request in requests)
    assert all(
        request.deck_target_font_size == measurement.target_font_size
        for request in applied
    )


def test_measure_deck_ignores_existing_deck_target() -> None:
    """Measure solo sizes without a stale deck target."""
    stale = CaptionRenderRequest(
        preset_id="clean_white",
        headline_text="Hello",
        container_width_px=1080,
        full_screen=True,
        deck_target_font_size=10,
    )
    measurement = measure_deck([stale], FixedAdvanceMeasurer(0.1))
    assert measurement.target_font_size == pytest.approx(52.8)


def test_empty_deck() -> None:
    """Return no target for an empty deck."""
    measurement = measure_deck([], FixedAdvanceMeasurer())

    assert measurement.target_font_size is None
    assert measurement.solo_results == ()
    assert resolve_deck([], FixedAdvanceMeasurer()) == ()


def test_width_mismatch_logs_and_keeps_own_width(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Warn about mismatched widths and fit each caption at its own width."""
    requests = [
        build_request("Wide", container_width_px=1080),
        build_request("Narrow", container_width_px=720),
    ]
    with caplog.at_level(logging.WARNING, logger="caption_engine.deck"):
        styles = resolve_deck(requests, FixedAdvanceMeasurer(0.1))

    assert "caption_engine.deck.width_mismatch" in caplog.text
    assert styles[0].container.width_px == pytest.approx(960)
    assert styles[1].container.width_px == pytest.approx(640)


def test_resolve_deck_shares_fit_cache() -> None:
    """Reuse solo fits when the deck target equals the solo ceiling."""
    cache = FitCache()
    requests = [build_request("Same caption"), build_request("Same caption")]
    resolve_deck(requests, FixedAdvanceMeasurer(0.1), cache)

    assert cache.misses >= 1
    assert cache.hits >= 1
