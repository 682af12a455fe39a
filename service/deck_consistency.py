"""Two-phase font-size alignment across a deck of captions."""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
from typing import Sequence, Tuple

from domain.caption_style import CaptionRenderRequest, FitResult
from service.fit_engine import FitCache
from service.style_resolver import RenderedCaptionStyle, resolve_caption_style
from service.text_metrics import TextMeasurer

LOGGER = logging.getLogger("caption_engine.deck")

WIDTH_MISMATCH_CODE = "caption_engine.deck.width_mismatch"
DECK_TARGET_CODE = "caption_engine.deck.target"


@dataclass(frozen=True)
class DeckMeasurement:
    """Solo fits of every caption and the shared target size."""

    target_font_size: float | None
    solo_results: Tuple[FitResult, ...]
    solo_ceilings: Tuple[float, ...]
    per_caption_targets: Tuple[float, ...]


def _warn_on_width_mismatch(requests: Sequence[CaptionRenderRequest]) -> None:
    if not requests:
        return
    deck_width = requests[0].container_width_px
    for index, request in enumerate(requests):
        if request.container_width_px != deck_width:
            LOGGER.warning(
                "%s: caption %d has width %.1f, deck width is %.1f",
                WIDTH_MISMATCH_CODE,
                index,
                request.container_width_px,
                deck_width,
            )


def measure_deck(
    requests: Sequence[CaptionRenderRequest],
    measurer: TextMeasurer,
    fit_cache: FitCache | None = None,
) -> DeckMeasurement:
    """Fit every caption on its own and take the smallest size as the target."""
    _warn_on_width_mismatch(requests)
    solo_results: list[FitResult] = []
    solo_ceilings: list[float] = []
    for request in requests:
        solo_style = resolve_caption_style(
            replace(request, deck_target_font_size=None), measurer, fit_cache
        )
        solo_results.append(solo_style.fit_result)
        solo_ceilings.append(solo_style.fit_settings.base_font_size)

    if not solo_results:
        return DeckMeasurement(
            target_font_size=None,
            solo_results=(),
            solo_ceilings=(),
            per_caption_targets=(),
        )

    target_font_size = min(result.font_size for result in solo_results)
    LOGGER.debug(
        "%s: %.2f across %d captions", DECK_TARGET_CODE, target_font_size, len(requests)
    )
    return DeckMeasurement(
        target_font_size=target_font_size,
        solo_results=tuple(solo_results),
        solo_ceilings=tuple(solo_ceilings),
        per_caption_targets=tuple(
            min(ceiling, target_font_size) for ceiling in solo_ceilings
        ),
    )


def apply_deck_target(
    requests: Sequence[CaptionRenderRequest], measurement: DeckMeasurement
) -> Tuple[CaptionRenderRequest, ...]:
    """Return copies of the requests carrying the deck target size."""
    return tuple(
        replace(request, deck_target_font_size=measurement.target_font_size)
        for request in requests
    )


def resolve_deck(
    requests: Sequence[CaptionRenderRequest],
    measurer: TextMeasurer,
    fit_cache: FitCache | None = None,
) -> Tuple[RenderedCaptionStyle, ...]:
    """Measure the deck, then resolve every caption against the shared target."""
    measurement = measure_deck(requests, measurer, fit_cache)
    return tuple(
        resolve_caption_style(request, measurer, fit_cache)
        for request in apply_deck_target(requests, measurement)
    )
