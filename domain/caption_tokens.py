"""Static caption token tables: typography, colors, backgrounds, animation, presets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict

from domain.caption_style import (
    INVALID_TOKEN_CODE,
    CaptionValidationError,
    KaraokeStyle,
)

TOKEN_VERSION = 1

DEFAULT_PRESET_ID = "clean_white"
DEFAULT_TYPOGRAPHY_ID = "sans"
DEFAULT_COLOR_ID = "shadowWhite"
DEFAULT_BACKGROUND_ID = "none"
DEFAULT_ANIMATION_ID = "fade"


class TextTransform(str, Enum):
    """Text case transform applied before measuring."""

    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"

    def apply(self, text_value: str) -> str:
        """Return text with this transform applied."""
        if self is TextTransform.UPPERCASE:
            return text_value.upper()
        if self is TextTransform.LOWERCASE:
            return text_value.lower()
        if self is TextTransform.CAPITALIZE:
            return " ".join(word[:1].upper() + word[1:] for word in text_value.split(" "))
        return text_value


class BackgroundTreatment(str, Enum):
    """Panel shape behind caption text."""

    NONE = "none"
    PILL = "pill"
    PANEL = "panel"
    BLUR = "blur"
    GRADIENT = "gradient"


@dataclass(frozen=True)
class TypographyToken:
    """Font description for a caption headline."""

    font_family: str
    font_size: float
    font_weight: int
    line_height: float
    letter_spacing: float
    text_transform: TextTransform = TextTransform.NONE

    def __post_init__(self) -> None:
        if self.font_size <= 0:
            raise CaptionValidationError(
                INVALID_TOKEN_CODE, "typography font_size must be positive"
            )
        if self.line_height <= 0:
            raise CaptionValidationError(
                INVALID_TOKEN_CODE, "typography line_height must be positive"
            )


@dataclass(frozen=True)
class ColorToken:
    """Text, panel, stroke and shadow colors."""

    text: str
    text_secondary: str | None = None
    background: str | None = None
    background_opacity: float | None = None
    highlight: str | None = None
    stroke: str | None = None
    stroke_width: float | None = None
    shadow: str | None = None

    def __post_init__(self) -> None:
        if self.background_opacity is not None and not (
            0.0 <= self.background_opacity <= 1.0
        ):
            raise CaptionValidationError(
                INVALID_TOKEN_CODE, "background_opacity must be in [0, 1]"
            )


@dataclass(frozen=True)
class BackgroundToken:
    """Panel treatment and its padding."""

    treatment: BackgroundTreatment
    padding_x: float
    padding_y: float
    border_radius: float
    blur_amount: float | None = None

    def __post_init__(self) -> None:
        if self.padding_x < 0 or self.padding_y < 0:
            raise CaptionValidationError(
                INVALID_TOKEN_CODE, "background padding must be non-negative"
            )


@dataclass(frozen=True)
class MotionTransform:
    """Offset, scale and opacity at the start or end of an animation."""

    translate_x: float | None = None
    translate_y: float | None = None
    scale: float | None = None
    opacity: float | None = None


@dataclass(frozen=True)
class AnimationToken:
    """Entrance and exit timing for a caption."""

    entrance_duration_ms: int
    exit_duration_ms: int
    entrance_easing: str
    exit_easing: str
    entrance_transform: MotionTransform | None = None
    exit_transform: MotionTransform | None = None


@dataclass(frozen=True)
class CaptionPreset:
    """Named bundle of typography, color and background token ids."""

    preset_id: str
    name: str
    description: str
    typography_id: str
    color_id: str
    background_id: str
    karaoke_style: KaraokeStyle = KaraokeStyle.WEIGHT
    version: int = TOKEN_VERSION


TYPOGRAPHY_TOKENS: Dict[str, TypographyToken] = {
    "sans": TypographyToken(
        font_family="Inter, -apple-system, BlinkMacSystemFont, sans-serif",
        font_size=48,
        font_weight=600,
        line_height=1.3,
        letter_spacing=0,
    ),
    "serif": TypographyToken(
        font_family="Georgia, 'Times New Roman', serif",
        font_size=44,
        font_weight=500,
        line_height=1.4,
        letter_spacing=0.5,
    ),
    "mono": TypographyToken(
        font_family="'JetBrains Mono', 'SF Mono', monospace",
        font_size=40,
        font_weight=500,
        line_height=1.3,
        letter_spacing=0,
    ),
    "impact": TypographyToken(
        font_family="'Bebas Neue', Impact, sans-serif",
        font_size=56,
        font_weight=700,
        line_height=1.1,
        letter_spacing=2,
        text_transform=TextTransform.UPPERCASE,
    ),
    "display": TypographyToken(
        font_family="'Poppins', 'Montserrat', sans-serif",
        font_size=52,
        font_weight=700,
        line_height=1.2,
        letter_spacing=-0.5,
    ),
}

COLOR_TOKENS: Dict[str, ColorToken] = {
    "white": ColorToken(text="#FFFFFF", text_secondary="#CCCCCC"),
    "black": ColorToken(text="#000000", text_secondary="#333333"),
    "whiteOnDark": ColorToken(
        text="#FFFFFF", background="#000000", background_opacity=0.7
    ),
    "blackOnLight": ColorToken(
        text="#000000", background="#FFFFFF", background_opacity=0.85
    ),
    "highlightYellow": ColorToken(
        text="#000000",
        background="#FFE500",
        background_opacity=1.0,
        highlight="#FFFF00",
    ),
    "highlightPink": ColorToken(
        text="#FFFFFF",
        background="#FF1493",
        background_opacity=1.0,
        highlight="#FF69B4",
    ),
    "neonBlue": ColorToken(
        text="#00FFFF",
        stroke="#FFFFFF",
        stroke_width=1,
        shadow="0 0 10px #00FFFF, 0 0 20px #00FFFF, 0 0 40px rgba(0,255,255,0.5)",
    ),
    "gradientPurple": ColorToken(
        text="#FFFFFF",
        background="linear-gradient(135deg, #667eea 0%, #764ba2 100%)",
        background_opacity=0.9,
    ),
    "neutral": ColorToken(
        text="#E5E5E5", text_secondary="#A0A0A0", stroke="#404040", stroke_width=1
    ),
    "shadowWhite": ColorToken(
        text="#FFFFFF",
        shadow="2px 2px 4px rgba(0,0,0,0.8), -2px -2px 4px rgba(0,0,0,0.3)",
    ),
}

BACKGROUND_TOKENS: Dict[str, BackgroundToken] = {
    "none": BackgroundToken(
        treatment=BackgroundTreatment.NONE, padding_x=0, padding_y=0, border_radius=0
    ),
    "pill": BackgroundToken(
        treatment=BackgroundTreatment.PILL, padding_x=24, padding_y=12, border_radius=999
    ),
    "panel": BackgroundToken(
        treatment=BackgroundTreatment.PANEL, padding_x=20, padding_y=10, border_radius=8
    ),
    "blur": BackgroundToken(
        treatment=BackgroundTreatment.BLUR,
        padding_x=16,
        padding_y=8,
        border_radius=12,
        blur_amount=10,
    ),
    "gradient": BackgroundToken(
        treatment=BackgroundTreatment.GRADIENT,
        padding_x=24,
        padding_y=14,
        border_radius=16,
    ),
}

ANIMATION_TOKENS: Dict[str, AnimationToken] = {
    "none": AnimationToken(
        entrance_duration_ms=0,
        exit_duration_ms=0,
        entrance_easing="linear",
        exit_easing="linear",
    ),
    "fade": AnimationToken(
        entrance_duration_ms=250,
        exit_duration_ms=180,
        entrance_easing="ease-out",
        exit_easing="ease-in",
        entrance_transform=MotionTransform(opacity=0),
        exit_transform=MotionTransform(opacity=0),
    ),
    "slide_up": AnimationToken(
        entrance_duration_ms=280,
        exit_duration_ms=200,
        entrance_easing="cubic-bezier(0.16, 1, 0.3, 1)",
        exit_easing="ease-in",
        entrance_transform=MotionTransform(translate_y=30, opacity=0),
        exit_transform=MotionTransform(translate_y=-15, opacity=0),
    ),
    "pop": AnimationToken(
        entrance_duration_ms=220,
        exit_duration_ms=150,
        entrance_easing="cubic-bezier(0.34, 1.56, 0.64, 1)",
        exit_easing="ease-in",
        entrance_transform=MotionTransform(scale=0.85, opacity=0),
        exit_transform=MotionTransform(scale=0.95, opacity=0),
    ),
    "typewriter": AnimationToken(
        entrance_duration_ms=300,
        exit_duration_ms=100,
        entrance_easing="steps(1)",
        exit_easing="ease-out",
        entrance_transform=MotionTransform(opacity=0),
        exit_transform=MotionTransform(opacity=0),
    ),
}


def _preset(
    preset_id: str,
    name: str,
    description: str,
    typography_id: str,
    color_id: str,
    background_id: str,
    karaoke_style: KaraokeStyle,
) -> CaptionPreset:
    return CaptionPreset(
        preset_id=preset_id,
        name=name,
        description=description,
        typography_id=typography_id,
        color_id=color_id,
        background_id=background_id,
        karaoke_style=karaoke_style,
    )


CAPTION_PRESETS: Dict[str, CaptionPreset] = {
    preset.preset_id: preset
    for preset in (
        _preset("clean_white", "Clean White", "Simple white text with shadow",
                "sans", "shadowWhite", "none", KaraokeStyle.WEIGHT),
        _preset("clean_black", "Clean Black", "Simple black text for light backgrounds",
                "sans", "black", "none", KaraokeStyle.WEIGHT),
        _preset("boxed_white", "Boxed White", "White text with dark background box",
                "sans", "whiteOnDark", "panel", KaraokeStyle.BRIGHTNESS),
        _preset("boxed_black", "Boxed Black", "Black text with light background box",
                "sans", "blackOnLight", "panel", KaraokeStyle.BRIGHTNESS),
        _preset("highlight_yellow", "Highlight Yellow", "Bold yellow highlight effect",
                "impact", "highlightYellow", "pill", KaraokeStyle.COLOR),
        _preset("highlight_pink", "Highlight Pink", "Vibrant pink highlight",
                "impact", "highlightPink", "pill", KaraokeStyle.COLOR),
        _preset("typewriter", "Typewriter", "Monospace typewriter effect",
                "mono", "neutral", "blur", KaraokeStyle.UNDERLINE),
        _preset("gradient_purple", "Gradient Purple", "Purple gradient background",
                "display", "gradientPurple", "gradient", KaraokeStyle.BRIGHTNESS),
        _preset("neon_blue", "Neon Blue", "Glowing neon effect",
                "display", "neonBlue", "none", KaraokeStyle.BRIGHTNESS),
        _preset("minimal_shadow", "Minimal Shadow", "Clean white with subtle shadow",
                "sans", "shadowWhite", "none", KaraokeStyle.WEIGHT),
        _preset("bold_impact", "Bold Impact", "Heavy uppercase impact style",
                "impact", "white", "none", KaraokeStyle.WEIGHT),
        _preset("elegant_serif", "Elegant Serif", "Refined serif typography",
                "serif", "white", "none", KaraokeStyle.UNDERLINE),
    )
}
