"""Top-down font-size search that fits caption text inside a panel."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Callable, Dict, Hashable, Sequence, Tuple

from domain.caption_style import (
    INVALID_CONFIG_CODE,
    CaptionValidationError,
    FitResult,
    FitSettings,
)
from service.text_metrics import TextMeasurer
from service.title_composer import compose_lines

LOGGER = logging.getLogger("caption_engine.fit")

FLOOR_REACHED_CODE = "caption_engine.fit.floor_reached"
PROBE_CODE = "caption_engine.fit.probe"
NO_CONTAINER_CODE = "caption_engine.fit.no_container"

DECAY_RATIO = 0.05
MIN_DECAY_PX = 1
DEFAULT_FIT_CACHE_SIZE = 512

MAX_LINES_WARNING = "exceeds max lines at floor font size"
CONTAINER_WIDTH_WARNING = "container width must be positive"
PANEL_WIDTH_WARNING = "line exceeds panel width at floor font size"


def next_font_size(font_size: float) -> float:
    """Return the next smaller trial size."""
    return font_size - max(MIN_DECAY_PX, math.floor(DECAY_RATIO * font_size))


def wrap_words_to_width(
    words: Sequence[str],
    available_width: float,
    measure: Callable[[str], float],
) -> list[str]:
    """Greedily pack words into lines no wider than available_width.

    A word that is wider than the line on its own sits alone on its line.
    """
    lines: list[str] = []
    current: list[str] = []
    for word in words:
        if not current:
            current = [word]
            continue
        trial_line = " ".join(current + [word])
        if measure(trial_line) <= available_width:
            current.append(word)
        else:
            lines.append(" ".join(current))
            current = [word]
    if current:
        lines.append(" ".join(current))
    return lines


def _probe(
    candidate_lines: Tuple[str, ...],
    available_width: float,
    settings: FitSettings,
    font_size: float,
    measurer: TextMeasurer,
) -> Tuple[Tuple[str, ...], Tuple[float, ...]]:
    def measure(text_value: str) -> float:
        return measurer.measure(
            text_value, settings.font_family, settings.font_weight, font_size
        )

    lines: list[str] = []
    for candidate in candidate_lines:
        lines.extend(wrap_words_to_width(candidate.split(" "), available_width, measure))
    return tuple(lines), tuple(measure(line) for line in lines)


def _unmet_constraint(
    lines: Tuple[str, ...],
    line_widths: Tuple[float, ...],
    max_lines: int,
    available_width: float,
) -> str | None:
    if len(lines) > max_lines:
        return MAX_LINES_WARNING
    if any(width > available_width for width in line_widths):
        return PANEL_WIDTH_WARNING
    return None


def _panel_width(
    line_widths: Tuple[float, ...], padding: float, max_panel_width: float
) -> float:
    widest = max(line_widths) if line_widths else 0.0
    return min(widest + 2 * padding, max_panel_width)


def fit_text_to_box(
    text_value: str,
    container_width_px: float,
    settings: FitSettings,
    measurer: TextMeasurer,
) -> FitResult:
    """Find the largest font size at which text fits the panel.

    Sizes are probed from ``base_font_size`` downwards. The first probe that
    satisfies both the line cap and the panel width wins. If the floor is
    reached without a fit, the floor probe is returned with ``fitted=False``.
    A non-positive container yields an unfitted result at the floor size.
    """
    if container_width_px <= 0:
        LOGGER.warning(
            "%s: %s (got %s)",
            NO_CONTAINER_CODE,
            CONTAINER_WIDTH_WARNING,
            container_width_px,
        )
        composed = compose_lines(text_value, settings.layout_mode)
        return FitResult(
            lines=composed,
            font_size=settings.min_font_size,
            line_count=len(composed),
            panel_width=0.0,
            fitted=False,
            warning=CONTAINER_WIDTH_WARNING,
            iterations=0,
            overflow_log=(),
            line_widths=(),
        )

    max_panel_width = settings.max_panel_width(container_width_px)
    candidate_lines = compose_lines(text_value, settings.layout_mode)
    if candidate_lines == ("",):
        return FitResult(
            lines=("",),
            font_size=settings.base_font_size,
            line_count=1,
            panel_width=_panel_width((0.0,), settings.padding, max_panel_width),
            fitted=True,
            warning=None,
            iterations=0,
            overflow_log=(),
            line_widths=(0.0,),
        )

    available_width = settings.available_text_width(container_width_px)
    overflow_log: list[str] = []
    font_size = settings.base_font_size
    iterations = 0
    while True:
        lines, line_widths = _probe(
            candidate_lines, available_width, settings, font_size, measurer
        )
        iterations += 1
        unmet = _unmet_constraint(lines, line_widths, settings.max_lines, available_width)
        if unmet is None:
            return FitResult(
                lines=lines,
                font_size=font_size,
                line_count=len(lines),
                panel_width=_panel_width(line_widths, settings.padding, max_panel_width),
                fitted=True,
                warning=None,
                iterations=iterations,
                overflow_log=tuple(overflow_log),
                line_widths=line_widths,
            )

        entry = (
            f"{font_size:.2f}px: {len(lines)} lines, widest {max(line_widths):.1f}px"
            f" of {available_width:.1f}px"
        )
        overflow_log.append(entry)
        LOGGER.debug("%s: %s", PROBE_CODE, entry)

        if font_size <= settings.min_font_size:
            LOGGER.warning(
                "%s: %s (%d lines, max %d)",
                FLOOR_REACHED_CODE,
                unmet,
                len(lines),
                settings.max_lines,
            )
            return FitResult(
                lines=lines,
                font_size=font_size,
                line_count=len(lines),
                panel_width=_panel_width(line_widths, settings.padding, max_panel_width),
                fitted=False,
                warning=unmet,
                iterations=iterations,
                overflow_log=tuple(overflow_log),
                line_widths=line_widths,
            )
        font_size = max(next_font_size(font_size), settings.min_font_size)


@dataclass
class FitCache:
    """Bounded memo of fit results keyed by every fit input."""

    max_entries: int = DEFAULT_FIT_CACHE_SIZE
    entries: Dict[Hashable, FitResult] = field(default_factory=dict)
    hits: int = 0
    misses: int = 0

    def __post_init__(self) -> None:
        if self.max_entries <= 0:
            raise CaptionValidationError(
                INVALID_CONFIG_CODE, "max_entries must be positive"
            )

    def __len__(self) -> int:
        return len(self.entries)

    def fit(
        self,
        text_value: str,
        container_width_px: float,
        settings: FitSettings,
        measurer: TextMeasurer,
    ) -> FitResult:
        """Return a cached fit result, computing it on a miss."""
        cache_key = (measurer, text_value, container_width_px, settings)
        cached = self.entries.get(cache_key)
        if cached is not None:
            self.hits += 1
            return cached
        self.misses += 1
        result = fit_text_to_box(text_value, container_width_px, settings, measurer)
        if len(self.entries) >= self.max_entries:
            del self.entries[next(iter(self.entries))]
        self.entries[cache_key] = result
        return result

    def clear(self) -> None:
        """Drop every cached result and reset counters."""
        self.entries.clear()
        self.hits = 0
        self.misses = 0
