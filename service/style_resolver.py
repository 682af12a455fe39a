"""Resolve a caption request into a fitted, renderable style."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Dict, Tuple

from domain.caption_style import (
    SIZE_PREFERENCE_MULTIPLIERS,
    CaptionRenderRequest,
    FitResult,
    FitSettings,
    KaraokeStyle,
    LayoutMode,
)
from domain.caption_tokens import BackgroundTreatment, TextTransform, TypographyToken
from domain.safe_area import (
    BASE_HEIGHT,
    BASE_WIDTH,
    SafeAreaProfile,
    caption_max_width,
    caption_safe_y,
)
from service.fit_engine import FitCache, fit_text_to_box
from service.text_metrics import TextMeasurer
from service.token_resolver import ResolvedTokens, resolve_safe_area, resolve_tokens

LOGGER = logging.getLogger("caption_engine.style")

FLOOR_CLAMP_CODE = "caption_engine.style.floor_clamped"

FULL_SCREEN_SCALE = 1.0
WINDOWED_SCALE = 0.7
PARAGRAPH_SCALE = 0.85
FLOOR_FONT_SIZES: Dict[Tuple[bool, LayoutMode], float] = {
    (True, LayoutMode.TITLE): 32,
    (True, LayoutMode.PARAGRAPH): 24,
    (False, LayoutMode.TITLE): 24,
    (False, LayoutMode.PARAGRAPH): 18,
}
MAX_LINES_BY_MODE = {LayoutMode.TITLE: 3, LayoutMode.PARAGRAPH: 5}
PANEL_MAX_WIDTH_PERCENT = 92
SUPPORTING_SCALE = 0.5
SUPPORTING_FONT_WEIGHT = 400
SUPPORTING_LINE_HEIGHT = 1.3
SUPPORTING_MAX_LINES = 2
SUPPORTING_COLOR = "rgba(255,255,255,0.75)"
SUPPORTING_SHADOW = "0 1px 2px rgba(0,0,0,0.5)"
DEFAULT_TEXT_SHADOW = "0 2px 4px rgba(0,0,0,0.8), 0 4px 12px rgba(0,0,0,0.4)"
KARAOKE_GLOW_SHADOW = (
    "0 0 20px rgba(255,255,255,0.6), 0 0 40px rgba(255,255,255,0.3), "
    "0 2px 4px rgba(0,0,0,0.8)"
)


@dataclass(frozen=True)
class ContainerStyle:
    """Caption area inside the frame once safe-area insets are removed."""

    width_px: float
    inset_left_px: float
    inset_right_px: float
    safe_y: float


@dataclass(frozen=True)
class PanelStyle:
    """Background panel geometry and fill."""

    treatment: BackgroundTreatment
    width_px: float
    max_width_percent: float
    padding_x: float
    padding_y: float
    border_radius: float
    background: str | None
    background_opacity: float | None
    blur_amount: float | None


@dataclass(frozen=True)
class TextStyle:
    """Font and paint settings for one text role."""

    font_family: str
    font_size: float
    font_weight: int
    line_height: float
    letter_spacing: float
    text_transform: TextTransform
    color: str
    text_shadow: str
    stroke: str | None
    max_lines: int


@dataclass(frozen=True)
class RenderedCaptionStyle:
    """Everything a renderer needs to draw one caption."""

    preset_id: str
    container: ContainerStyle
    panel: PanelStyle
    headline: TextStyle
    supporting: TextStyle
    supporting_text: str | None
    font_size: float
    lines: Tuple[str, ...]
    fit_result: FitResult
    fit_settings: FitSettings
    safe_area: SafeAreaProfile
    safe_y: float
    karaoke_glow: str


def compute_base_font_size(
    typography: TypographyToken, request: CaptionRenderRequest
) -> float:
    """Return the font-size ceiling for a request, including any deck target."""
    ceiling = (
        typography.font_size
        * (FULL_SCREEN_SCALE if request.full_screen else WINDOWED_SCALE)
        * (PARAGRAPH_SCALE if request.layout_mode is LayoutMode.PARAGRAPH else 1.0)
        * SIZE_PREFERENCE_MULTIPLIERS[request.size_preference]
        * (request.global_scale_factor or 1.0)
    )
    if request.deck_target_font_size is not None:
        return min(ceiling, request.deck_target_font_size)
    return ceiling


def compute_min_font_size(request: CaptionRenderRequest, ceiling: float) -> float:
    """Return the font-size floor, never above the ceiling."""
    floor = (
        FLOOR_FONT_SIZES[(request.full_screen, request.layout_mode)]
        * SIZE_PREFERENCE_MULTIPLIERS[request.size_preference]
    )
    if floor > ceiling:
        LOGGER.debug(
            "%s: floor %.2f clamped to ceiling %.2f", FLOOR_CLAMP_CODE, floor, ceiling
        )
        return ceiling
    return floor


def compute_fit_width(
    container_width_px: float, profile: SafeAreaProfile
) -> Tuple[float, float, float]:
    """Return (fit width, left inset, right inset) scaled to the container."""
    scale = container_width_px / BASE_WIDTH
    inset_left = profile.insets.left * scale
    inset_right = profile.insets.right * scale
    return caption_max_width(profile, container_width_px), inset_left, inset_right


def build_fit_settings(
    request: CaptionRenderRequest, tokens: ResolvedTokens
) -> FitSettings:
    """Build fit constraints from a request and its resolved tokens."""
    ceiling = compute_base_font_size(tokens.typography, request)
    return FitSettings(
        max_lines=MAX_LINES_BY_MODE[request.layout_mode],
        panel_max_width_percent=PANEL_MAX_WIDTH_PERCENT,
        base_font_size=ceiling,
        min_font_size=compute_min_font_size(request, ceiling),
        padding=tokens.background.padding_x,
        line_height=tokens.typography.line_height,
        font_family=tokens.typography.font_family,
        font_weight=tokens.typography.font_weight,
        layout_mode=request.layout_mode,
    )


def resolve_caption_style(
    request: CaptionRenderRequest,
    measurer: TextMeasurer,
    fit_cache: FitCache | None = None,
) -> RenderedCaptionStyle:
    """Resolve tokens, safe area and fit for one caption request."""
    tokens = resolve_tokens(request.preset_id)
    profile = resolve_safe_area(request.safe_area_profile_id)
    settings = build_fit_settings(request, tokens)
    fit_width, inset_left, inset_right = compute_fit_width(
        request.container_width_px, profile
    )
    headline_text = tokens.typography.text_transform.apply(request.headline_text)

    if fit_cache is not None:
        fit_result = fit_cache.fit(headline_text, fit_width, settings, measurer)
    else:
        fit_result = fit_text_to_box(headline_text, fit_width, settings, measurer)

    # Frames are 9:16, so height follows from width.
    container_height = request.container_width_px * BASE_HEIGHT / BASE_WIDTH
    safe_y = caption_safe_y(profile, container_height)

    colors = tokens.colors
    if request.karaoke_enabled and request.karaoke_style is KaraokeStyle.GLOW:
        headline_shadow = KARAOKE_GLOW_SHADOW
    else:
        headline_shadow = colors.shadow or DEFAULT_TEXT_SHADOW
    stroke = (
        f"{colors.stroke_width or 1}px {colors.stroke}" if colors.stroke else None
    )

    headline = TextStyle(
        font_family=tokens.typography.font_family,
        font_size=fit_result.font_size,
        font_weight=tokens.typography.font_weight,
        line_height=tokens.typography.line_height,
        letter_spacing=tokens.typography.letter_spacing,
        text_transform=tokens.typography.text_transform,
        color=colors.text,
        text_shadow=headline_shadow,
        stroke=stroke,
        max_lines=settings.max_lines,
    )
    supporting = TextStyle(
        font_family=tokens.typography.font_family,
        font_size=fit_result.font_size * SUPPORTING_SCALE,
        font_weight=SUPPORTING_FONT_WEIGHT,
        line_height=SUPPORTING_LINE_HEIGHT,
        letter_spacing=0.0,
        text_transform=TextTransform.NONE,
        color=colors.text_secondary or SUPPORTING_COLOR,
        text_shadow=SUPPORTING_SHADOW,
        stroke=None,
        max_lines=SUPPORTING_MAX_LINES,
    )
    panel = PanelStyle(
        treatment=tokens.background.treatment,
        width_px=fit_result.panel_width,
        max_width_percent=settings.panel_max_width_percent,
        padding_x=tokens.background.padding_x,
        padding_y=tokens.background.padding_y,
        border_radius=tokens.background.border_radius,
        background=colors.background,
        background_opacity=colors.background_opacity,
        blur_amount=tokens.background.blur_amount,
    )
    container = ContainerStyle(
        width_px=fit_width,
        inset_left_px=inset_left,
        inset_right_px=inset_right,
        safe_y=safe_y,
    )

    return RenderedCaptionStyle(
        preset_id=tokens.preset.preset_id,
        container=container,
        panel=panel,
        headline=headline,
        supporting=supporting,
        supporting_text=request.supporting_text,
        font_size=fit_result.font_size,
        lines=fit_result.lines,
        fit_result=fit_result,
        fit_settings=settings,
        safe_area=profile,
        safe_y=safe_y,
        karaoke_glow=KARAOKE_GLOW_SHADOW,
    )
