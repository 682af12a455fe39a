"""Tests for resolving caption requests into fitted styles."""

from __future__ import annotations

import logging

import pytest

from domain.caption_style import (
    CaptionRenderRequest,
    KaraokeStyle,
    LayoutMode,
    SizePreference,
)
from domain.caption_tokens import COLOR_TOKENS
from service.fit_engine import FitCache
from service.style_resolver import (
    KARAOKE_GLOW_SHADOW,
    build_fit_settings,
    resolve_caption_style,
)
from service.token_resolver import resolve_tokens


class FixedAdvanceMeasurer:
    """Every character advances by a fixed fraction of the font size."""

    def __init__(self, advance_em: float = 0.5) -> None:
        self.advance_em = advance_em

    def measure(
        self, text_value: str, font_family: str, font_weight: int, font_size_px: float
    ) -> float:
        return len(text_value) * font_size_px * self.advance_em


def build_request(**overrides: object) -> CaptionRenderRequest:
    """Build a full-screen title request on a 1080 px frame."""
    values: dict[str, object] = {
        "preset_id": "clean_white",
        "headline_text": "Short headline",
        "container_width_px": 1080,
        "full_screen": True,
        "layout_mode": LayoutMode.TITLE,
        "size_preference": SizePreference.MEDIUM,
    }
    values.update(overrides)
    return CaptionRenderRequest(**values)  # type: ignore[arg-type]


def test_full_screen_title_ceiling_and_floor() -> None:
    """Scale the sans token by the medium multiplier in full screen."""
    settings = build_fit_settings(build_request(), resolve_tokens("clean_white"))

    assert settings.base_font_size == pytest.approx(52.8)
    assert settings.min_font_size == pytest.approx(35.2)
    assert settings.max_lines == 3
    assert settings.panel_max_width_percent == 92


def test_windowed_paragraph_ceiling_and_floor() -> None:
    """Apply windowed and paragraph scaling to the ceiling."""
    request = build_request(full_screen=False, layout_mode=LayoutMode.PARAGRAPH)
    settings = build_fit_settings(request, resolve_tokens("clean_white"))

    assert settings.base_font_size == pytest.approx(48 * 0.7 * 0.85 * 1.1)
    assert settings.min_font_size == pytest.approx(19.8)
    assert settings.max_lines == 5


def test_deck_target_caps_ceiling_and_floor() -> None:
    """Clamp both ceiling and floor to a small deck target."""
    settings = build_fit_settings(
        build_request(deck_target_font_size=20), resolve_tokens("clean_white")
    )
    assert settings.base_font_size == 20
    assert settings.min_font_size == 20


def test_global_scale_factor_multiplies_ceiling() -> None:
    """Multiply the ceiling by the global scale factor."""
    settings = build_fit_settings(
        build_request(global_scale_factor=0.5), resolve_tokens("clean_white")
    )
    assert settings.base_font_size == pytest.approx(26.4)
    assert settings.min_font_size == pytest.approx(26.4)


def test_background_padding_feeds_fit_settings() -> None:
    """Use the background token padding as fit padding."""
    settings = build_fit_settings(
        build_request(preset_id="boxed_white"), resolve_tokens("boxed_white")
    )
    assert settings.padding == 20


def test_resolve_short_caption_at_ceiling() -> None:
    """Fit a short headline at the ceiling and derive the supporting size."""
    style = resolve_caption_style(build_request(), FixedAdvanceMeasurer(0.1))

    assert style.font_size == pytest.approx(52.8)
    assert style.fit_result.fitted is True
    assert style.lines == ("Short headline",)
    assert style.supporting.font_size == pytest.approx(style.headline.font_size / 2)
    assert style.container.width_px == pytest.approx(960)
    assert style.safe_y == pytest.approx(1660)
    assert style.safe_area.profile_id == "universal"


def test_resolve_applies_text_transform_before_fit() -> None:
    """Uppercase headlines for presets whose typography requires it."""
    style = resolve_caption_style(
        build_request(preset_id="bold_impact", headline_text="Make it loud"),
        FixedAdvanceMeasurer(0.1),
    )
    assert style.lines == ("MAKE IT LOUD",)


def test_resolve_uses_glow_shadow_for_glow_karaoke() -> None:
    """Swap the headline shadow for the glow in glow karaoke mode."""
    measurer = FixedAdvanceMeasurer(0.1)
    glowing = resolve_caption_style(
        build_request(karaoke_enabled=True, karaoke_style=KaraokeStyle.GLOW), measurer
    )
    plain = resolve_caption_style(build_request(karaoke_enabled=True), measurer)

    assert glowing.headline.text_shadow == KARAOKE_GLOW_SHADOW
    assert plain.headline.text_shadow == COLOR_TOKENS["shadowWhite"].shadow
    assert glowing.font_size == plain.font_size


def test_resolve_unknown_preset_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    """Fall back to the default preset and log a warning."""
    with caplog.at_level(logging.WARNING, logger="caption_engine.tokens"):
        style = resolve_caption_style(
            build_request(preset_id="missing"), FixedAdvanceMeasurer(0.1)
        )

    assert style.preset_id == "clean_white"
    assert "caption_engine.tokens.unknown_preset" in caplog.text


def test_resolve_long_headline_never_exceeds_bounds() -> None:
    """Keep the fitted size between floor and ceiling for long headlines."""
    headline = " ".join(["overflowing"] * 30)
    style = resolve_caption_style(
        build_request(headline_text=headline), FixedAdvanceMeasurer()
    )
    settings = style.fit_settings

    assert settings.min_font_size <= style.font_size <= settings.base_font_size
    assert style.panel.width_px <= style.container.width_px * 0.92 + 1e-9


def test_resolve_uses_fit_cache() -> None:
    """Reuse cached fits for repeated requests."""
    cache = FitCache()
    measurer = FixedAdvanceMeasurer(0.1)
    resolve_caption_style(build_request(), measurer, cache)
    resolve_caption_style(build_request(), measurer, cache)

    assert cache.misses == 1
    assert cache.hits == 1


def test_resolve_passes_supporting_text_through() -> None:
    """Keep the supporting text alongside its half-size style."""
    style = resolve_caption_style(
        build_request(supporting_text="Episode 3"), FixedAdvanceMeasurer(0.1)
    )
    assert style.supporting_text == "Episode 3"
    assert style.supporting.font_weight == 400


def test_resolve_title_with_early_sentence_break_fits() -> None:
    """Fit a title that opens with a one-word sentence within the line cap."""
    style = resolve_caption_style(
        build_request(
            headline_text=(
                "Breaking. the city council approved the new transit budget late tonight"
            )
        ),
        FixedAdvanceMeasurer(),
    )

    assert style.fit_result.fitted is True
    assert style.fit_result.line_count == 3
    assert style.font_size == pytest.approx(52.8)
