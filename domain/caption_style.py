"""Domain types for caption layout and fitting."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Tuple

INVALID_SETTINGS_CODE = "caption_engine.input.invalid_settings"
INVALID_REQUEST_CODE = "caption_engine.input.invalid_request"
INVALID_TOKEN_CODE = "caption_engine.input.invalid_token"
INVALID_TRANSCRIPT_CODE = "caption_engine.input.invalid_transcript"
INVALID_CONFIG_CODE = "caption_engine.input.invalid_config"
INVALID_GROUPING_CODE = "caption_engine.input.invalid_grouping"

DEFAULT_FONT_FAMILY = "Inter, system-ui, -apple-system, BlinkMacSystemFont, sans-serif"
DEFAULT_FONT_WEIGHT = 700
LOGGER = logging.getLogger("caption_engine.input")


class CaptionValidationError(ValueError):
    """Validation error with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class LayoutMode(str, Enum):
    """How headline text is broken into display lines."""

    TITLE = "title"
    PARAGRAPH = "paragraph"


class SizePreference(str, Enum):
    """User-selected caption size."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class KaraokeStyle(str, Enum):
    """Karaoke highlight variants. Only GLOW changes the headline shadow."""

    WEIGHT = "weight"
    BRIGHTNESS = "brightness"
    UNDERLINE = "underline"
    COLOR = "color"
    GLOW = "glow"


SIZE_PREFERENCE_MULTIPLIERS = {
    SizePreference.SMALL: 0.9,
    SizePreference.MEDIUM: 1.1,
    SizePreference.LARGE: 1.35,
}


@dataclass(frozen=True)
class FitSettings:
    """Constraints for a single fit call. Hashable so it can key a cache."""

    max_lines: int
    panel_max_width_percent: float
    base_font_size: float
    min_font_size: float
    padding: float
    line_height: float
    font_family: str = DEFAULT_FONT_FAMILY
    font_weight: int = DEFAULT_FONT_WEIGHT
    layout_mode: LayoutMode = LayoutMode.PARAGRAPH

    def __post_init__(self) -> None:
        if self.max_lines < 1:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "max_lines must be at least 1"
            )
        if self.panel_max_width_percent <= 0 or self.panel_max_width_percent > 100:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "panel_max_width_percent must be in (0, 100]"
            )
        if self.base_font_size <= 0:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "base_font_size must be positive"
            )
        if self.min_font_size <= 0:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "min_font_size must be positive"
            )
        if self.min_font_size > self.base_font_size:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "min_font_size exceeds base_font_size"
            )
        if self.padding < 0:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "padding must be non-negative"
            )
        if self.line_height <= 0:
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "line_height must be positive"
            )
        if not isinstance(self.layout_mode, LayoutMode):
            raise CaptionValidationError(
                INVALID_SETTINGS_CODE, "layout_mode is invalid"
            )

    def max_panel_width(self, container_width_px: float) -> float:
        """Return the widest panel allowed inside the container."""
        return container_width_px * self.panel_max_width_percent / 100.0

    def available_text_width(self, container_width_px: float) -> float:
        """Return the width left for text once padding is removed."""
        return self.max_panel_width(container_width_px) - 2 * self.padding


@dataclass(frozen=True)
class FitResult:
    """Outcome of fitting text into a panel."""

    lines: Tuple[str, ...]
    font_size: float
    line_count: int
    panel_width: float
    fitted: bool
    warning: str | None
    iterations: int
    overflow_log: Tuple[str, ...]
    line_widths: Tuple[float, ...] = ()


@dataclass(frozen=True)
class CaptionRenderRequest:
    """Everything needed to resolve one caption's renderable style."""

    preset_id: str
    headline_text: str
    container_width_px: float
    full_screen: bool = False
    safe_area_profile_id: str = "universal"
    layout_mode: LayoutMode = LayoutMode.TITLE
    size_preference: SizePreference = SizePreference.MEDIUM
    global_scale_factor: float | None = None
    deck_target_font_size: float | None = None
    supporting_text: str | None = None
    karaoke_enabled: bool = False
    karaoke_style: KaraokeStyle = KaraokeStyle.WEIGHT

    def __post_init__(self) -> None:
        if self.container_width_px <= 0:
            raise CaptionValidationError(
                INVALID_REQUEST_CODE, "container_width_px must be positive"
            )
        if self.global_scale_factor is not None and self.global_scale_factor <= 0:
            raise CaptionValidationError(
                INVALID_REQUEST_CODE, "global_scale_factor must be positive"
            )
        if self.deck_target_font_size is not None and self.deck_target_font_size <= 0:
            raise CaptionValidationError(
                INVALID_REQUEST_CODE, "deck_target_font_size must be positive"
            )
        if not isinstance(self.layout_mode, LayoutMode):
            raise CaptionValidationError(
                INVALID_REQUEST_CODE, "layout_mode is invalid"
            )
        if not isinstance(self.size_preference, SizePreference):
            raise CaptionValidationError(
                INVALID_REQUEST_CODE, "size_preference is invalid"
            )


def parse_layout_mode(value: str) -> LayoutMode:
    """Parse a layout mode name, falling back to title mode."""
    normalized = value.strip().lower()
    try:
        return LayoutMode(normalized)
    except ValueError:
        LOGGER.warning(
            "caption_engine.input.unknown_layout_mode: %r, using title", value
        )
        return LayoutMode.TITLE


def parse_size_preference(value: str) -> SizePreference:
    """Parse a size preference name, falling back to medium."""
    normalized = value.strip().lower()
    try:
        return SizePreference(normalized)
    except ValueError:
        LOGGER.warning(
            "caption_engine.input.unknown_size_preference: %r, using medium", value
        )
        return SizePreference.MEDIUM


def normalize_whitespace(text_value: str) -> str:
    """Collapse runs of whitespace and strip a leading BOM."""
    return " ".join(text_value.replace("\ufeff", "").split())
