"""Text width measurement for caption fitting."""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, Protocol, Tuple

from PIL import Image, ImageDraw, ImageFont

from domain.caption_style import INVALID_CONFIG_CODE, CaptionValidationError

LOGGER = logging.getLogger("caption_engine.metrics")

FONT_FALLBACK_CODE = "caption_engine.metrics.font_fallback"

AVERAGE_ADVANCE_EM = 0.5
BOLD_WEIGHT_THRESHOLD = 600
GENERIC_FAMILIES = frozenset(
    {
        "serif",
        "sansserif",
        "monospace",
        "cursive",
        "fantasy",
        "systemui",
        "applesystem",
        "blinkmacsystemfont",
    }
)
NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9]")

FontHandle = ImageFont.FreeTypeFont | ImageFont.ImageFont


class TextMeasurer(Protocol):
    """Measures the advance width of a single line of text."""

    def measure(
        self, text_value: str, font_family: str, font_weight: int, font_size_px: float
    ) -> float: ...


def normalize_font_name(value: str) -> str:
    """Lowercase a font or family name and drop non-alphanumerics."""
    return NON_ALNUM_PATTERN.sub("", value.strip().strip("'\"").lower())


def split_font_family_stack(font_family: str) -> Tuple[str, ...]:
    """Split a CSS font-family stack into normalized concrete family names."""
    names = []
    for entry in font_family.split(","):
        normalized = normalize_font_name(entry)
        if normalized and normalized not in GENERIC_FAMILIES:
            names.append(normalized)
    return tuple(names)


def list_font_files(fonts_dir: str) -> list[str]:
    """List font files from the fonts directory."""
    if not os.path.isdir(fonts_dir):
        raise CaptionValidationError(
            INVALID_CONFIG_CODE, f"fonts directory does not exist: {fonts_dir}"
        )

    font_files: list[str] = []
    for entry_name in sorted(os.listdir(fonts_dir)):
        lower_name = entry_name.lower()
        if lower_name.endswith(".ttf") or lower_name.endswith(".otf"):
            font_files.append(os.path.join(fonts_dir, entry_name))

    if not font_files:
        raise CaptionValidationError(
            INVALID_CONFIG_CODE, f"no font files found in {fonts_dir}"
        )
    return font_files


def measure_text_width(
    draw_context: ImageDraw.ImageDraw,
    text_value: str,
    font: FontHandle,
) -> float:
    """Measure text width using font metrics."""
    if not text_value:
        return 0.0
    try:
        return float(draw_context.textlength(text_value, font=font))
    except (AttributeError, ValueError):
        bbox = draw_context.textbbox((0, 0), text_value, font=font)
        return float(bbox[2] - bbox[0])


class EstimatedTextMeasurer:
    """Average-advance estimate for environments without fonts."""

    def __init__(self, advance_em: float = AVERAGE_ADVANCE_EM) -> None:
        if advance_em <= 0:
            raise CaptionValidationError(
                INVALID_CONFIG_CODE, "advance_em must be positive"
            )
        self.advance_em = advance_em

    def measure(
        self, text_value: str, font_family: str, font_weight: int, font_size_px: float
    ) -> float:
        return len(text_value) * font_size_px * self.advance_em


class PillowTextMeasurer:
    """Measures text with Pillow FreeType metrics.

    Families in a CSS stack are matched against font file names in
    ``fonts_dir`` (``Inter-Bold.ttf`` serves ``Inter`` at weight 700). When
    nothing matches, Pillow's bundled default font is used at the requested
    size.
    """

    def __init__(self, fonts_dir: str | None = None) -> None:
        self.fonts_dir = fonts_dir
        self.font_files: Tuple[str, ...] = (
            tuple(list_font_files(fonts_dir)) if fonts_dir is not None else ()
        )
        self._font_cache: Dict[Tuple[str, float], FontHandle] = {}
        self._path_cache: Dict[Tuple[str, int], str | None] = {}
        self._draw_context = ImageDraw.Draw(Image.new("RGBA", (1, 1)))

    def resolve_font_path(self, font_family: str, font_weight: int) -> str | None:
        """Return the font file serving a family stack, or None for the default font."""
        cache_key = (font_family, font_weight)
        if cache_key in self._path_cache:
            return self._path_cache[cache_key]

        resolved: str | None = None
        wants_bold = font_weight >= BOLD_WEIGHT_THRESHOLD
        for family_name in split_font_family_stack(font_family):
            candidates = [
                path
                for path in self.font_files
                if normalize_font_name(os.path.splitext(os.path.basename(path))[0])
                .startswith(family_name)
            ]
            if not candidates:
                continue
            matching_weight = [
                path
                for path in candidates
                if ("bold" in os.path.basename(path).lower()) == wants_bold
            ]
            resolved = (matching_weight or candidates)[0]
            break

        if resolved is None:
            LOGGER.debug(
                "%s: no font file for %r, using default font",
                FONT_FALLBACK_CODE,
                font_family,
            )
        self._path_cache[cache_key] = resolved
        return resolved

    def load_font(self, font_path: str | None, font_size_px: float) -> FontHandle:
        """Load a font and cache by path and size.

        An unreadable font file is a configuration error.
        """
        cache_key = (font_path or "", font_size_px)
        cached_font = self._font_cache.get(cache_key)
        if cached_font is not None:
            return cached_font
        if font_path is None:
            font = ImageFont.load_default(size=font_size_px)
        else:
            try:
                font = ImageFont.truetype(
                    font_path, size=font_size_px, layout_engine=ImageFont.Layout.BASIC
                )
            except OSError as exc:
                raise CaptionValidationError(
                    INVALID_CONFIG_CODE,
                    f"failed to load font {font_path} at size {font_size_px}",
                ) from exc
        self._font_cache[cache_key] = font
        return font

    def measure(
        self, text_value: str, font_family: str, font_weight: int, font_size_px: float
    ) -> float:
        if not text_value:
            return 0.0
        font = self.load_font(
            self.resolve_font_path(font_family, font_weight), font_size_px
        )
        return measure_text_width(self._draw_context, text_value, font)
